import pytest
from ordering.order.tracking import format_tracking_code, parse_tracking_code
from protean.exceptions import ValidationError


class TestFormatTrackingCode:
    @pytest.mark.parametrize(
        "number, code",
        [(1, "SOS001"), (7, "SOS007"), (42, "SOS042"), (999, "SOS999"), (1000, "SOS1000"), (123456, "SOS123456")],
    )
    def test_pads_to_three_digits_and_widens_beyond(self, number, code):
        assert format_tracking_code(number) == code


class TestParseTrackingCode:
    def test_parses_order_number(self):
        assert parse_tracking_code("SOS007") == 7

    def test_accepts_wide_numbers(self):
        assert parse_tracking_code("SOS1234") == 1234

    def test_trims_surrounding_whitespace(self):
        assert parse_tracking_code("  SOS010 ") == 10

    @pytest.mark.parametrize("code", ["XYZ007", "SOS", "", None, "SOS-007", "sos007", "SOS7a", "007"])
    def test_rejects_malformed_codes(self, code):
        with pytest.raises(ValidationError) as exc:
            parse_tracking_code(code)
        assert "tracking_code" in exc.value.messages
