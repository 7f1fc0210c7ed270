from ordering.catalogue.catalog import list_available
from ordering.catalogue.seed import SAMPLE_SHOES, seed_catalog


class TestSeedCatalog:
    def test_empty_catalog_is_seeded(self):
        assert seed_catalog() == len(SAMPLE_SHOES)

        names = [product.name for product in list_available()]
        assert sorted(names) == sorted(name for name, *_ in SAMPLE_SHOES)

    def test_seeding_is_skipped_when_products_exist(self, shoes):
        assert seed_catalog() == 0
        assert len(list_available()) == 2

    def test_seeding_twice_adds_nothing(self):
        seed_catalog()
        assert seed_catalog() == 0
        assert len(list_available()) == len(SAMPLE_SHOES)
