"""Tracking codes: the human-facing form of an order number (``SOS007``)."""

import re

from protean.exceptions import ValidationError

from ordering.domain import setting


def _prefix() -> str:
    return setting("TRACKING_PREFIX", "SOS")


def format_tracking_code(number: int) -> str:
    """Prefix plus the number zero-padded to the minimum width; wider numbers are kept whole."""
    digits = int(setting("TRACKING_DIGITS", 3))
    return f"{_prefix()}{int(number):0{digits}d}"


def parse_tracking_code(code) -> int:
    """Return the order number in ``code``, or raise ``ValidationError``."""
    prefix = _prefix()
    match = re.fullmatch(rf"{re.escape(prefix)}([0-9]+)", (code or "").strip())
    if match is None:
        raise ValidationError(
            {"tracking_code": [f"Invalid tracking code format. It should be like {format_tracking_code(1)}"]}
        )
    return int(match.group(1))
