import tempfile
import unittest
from pathlib import Path

from sqlalchemy import create_engine

from prodlog.kv_store import (
    InMemoryKeyValueStore, JsonFileKeyValueStore, SqlKeyValueStore, create_store
)
from prodlog.production_data.storage import ProductionDataStorage


class StoreContract:
    """Behaviour every backend shares; mixed into a TestCase with make_store()"""

    def make_store(self):
        raise NotImplementedError

    def test_missing_key_is_none(self):
        self.assertIsNone(self.make_store().get("nothing"))

    def test_set_then_get(self):
        store = self.make_store()
        store.set("productionData", '[{"id": "1"}]')
        self.assertEqual(store.get("productionData"), '[{"id": "1"}]')

    def test_set_overwrites(self):
        store = self.make_store()
        store.set("k", "first")
        store.set("k", "second")
        self.assertEqual(store.get("k"), "second")

    def test_slots_are_independent(self):
        store = self.make_store()
        store.set("products", "[]")
        store.set("workers", '[{"id": "W1"}]')
        self.assertEqual(store.get("products"), "[]")
        self.assertEqual(store.get("workers"), '[{"id": "W1"}]')

    def test_remove(self):
        store = self.make_store()
        store.set("k", "v")
        store.remove("k")
        self.assertIsNone(store.get("k"))
        store.remove("k")  # absent key is a no-op

    def test_unicode_value(self):
        store = self.make_store()
        store.set("k", '["製品A"]')
        self.assertEqual(store.get("k"), '["製品A"]')


class TestInMemoryStore(StoreContract, unittest.TestCase):
    def make_store(self):
        return InMemoryKeyValueStore()

    def test_rejects_non_string(self):
        with self.assertRaises(TypeError):
            InMemoryKeyValueStore().set("k", [1, 2])


class TestJsonFileStore(StoreContract, unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name) / "slots"

    def tearDown(self):
        self._tmp.cleanup()

    def make_store(self):
        return JsonFileKeyValueStore(self.directory)

    def test_one_file_per_slot(self):
        store = self.make_store()
        store.set("productionData", "[]")
        self.assertTrue((self.directory / "productionData.json").exists())
        self.assertEqual(sorted(p.name for p in self.directory.iterdir()), ["productionData.json"])

    def test_persists_across_instances(self):
        self.make_store().set("k", "v")
        self.assertEqual(self.make_store().get("k"), "v")

    def test_rejects_path_like_keys(self):
        with self.assertRaises(ValueError):
            self.make_store().set("../escape", "v")


class TestSqlStore(StoreContract, unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.engine = create_engine(f"sqlite:///{Path(self._tmp.name) / 'kv.db'}")

    def tearDown(self):
        self.engine.dispose()
        self._tmp.cleanup()

    def make_store(self):
        return SqlKeyValueStore(self.engine)

    def test_persists_across_instances(self):
        self.make_store().set("k", "v")
        self.assertEqual(self.make_store().get("k"), "v")

    def test_backs_production_storage(self):
        storage = ProductionDataStorage(self.make_store())
        storage.add({"id": "1", "product_id": "P"})
        storage.add({"id": "2", "product_id": "Q"})
        storage.delete("1")
        self.assertEqual(ProductionDataStorage(self.make_store()).get_all(),
                         [{"id": "2", "product_id": "Q"}])


class TestCreateStore(unittest.TestCase):
    def test_memory_backend(self):
        self.assertIsInstance(create_store("memory"), InMemoryKeyValueStore)

    def test_file_backend(self):
        self.assertIsInstance(create_store("file"), JsonFileKeyValueStore)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_store("redis")


if __name__ == "__main__":
    unittest.main()
