import json
import unittest

from prodlog.kv_store import InMemoryKeyValueStore
from prodlog.production_data.common import lookup_name
from prodlog.production_data.master_data import MasterDataRepository

PRODUCTS = [{"id": "P1", "name": "Bracket"}, {"id": "P2", "name": "Housing"}]
WORKERS = [{"id": "W1", "name": "Sato"}]


class TestMasterDataRepository(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore({
            "products": json.dumps(PRODUCTS),
            "workers": json.dumps(WORKERS),
        })
        self.repo = MasterDataRepository(self.store)

    def test_reads_each_slot(self):
        self.assertEqual(self.repo.get_products(), PRODUCTS)
        self.assertEqual(self.repo.get_workers(), WORKERS)

    def test_absent_slot_is_empty(self):
        self.assertEqual(self.repo.get_processes(), [])

    def test_malformed_slot_does_not_block_others(self):
        self.store.set("processes", "{oops")
        master = self.repo.load_all()
        self.assertEqual(master["processes"], [])
        self.assertEqual(master["products"], PRODUCTS)
        self.assertEqual(master["workers"], WORKERS)

    def test_non_list_slot_is_empty(self):
        self.store.set("products", json.dumps({"id": "P1"}))
        self.assertEqual(self.repo.get_products(), [])

    def test_build_options_keeps_order(self):
        options = MasterDataRepository.build_options(PRODUCTS)
        self.assertEqual(list(options.items()), [("Bracket (P1)", "P1"), ("Housing (P2)", "P2")])

    def test_build_options_without_name_uses_id(self):
        options = MasterDataRepository.build_options([{"id": "X"}, {"name": "no id"}])
        self.assertEqual(options, {"X": "X"})

    def test_lookup_name(self):
        self.assertEqual(lookup_name(PRODUCTS, "P2"), "Housing")
        self.assertEqual(lookup_name(PRODUCTS, "P9"), "P9")
        self.assertEqual(lookup_name(PRODUCTS, None), "")


if __name__ == "__main__":
    unittest.main()
