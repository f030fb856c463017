import json
import unittest
from datetime import date, datetime

from prodlog.kv_store import InMemoryKeyValueStore, KeyValueStore
from prodlog.production_data.results import StorageErrorKind
from prodlog.production_data.storage import ProductionDataStorage

KEY = "productionData"


def make_record(record_id, product="P-100", day="2024-03-01", quantity=10):
    return {
        "id": record_id,
        "product_id": product,
        "process_id": "PR-1",
        "worker_id": "W-1",
        "date": day,
        "quantity": quantity,
    }


class BrokenStore(KeyValueStore):
    """Store whose reads and/or writes raise like a full or missing backend"""

    def __init__(self, value=None, fail_get=False, fail_set=False):
        self.value = value
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.writes = 0

    def get(self, key):
        if self.fail_get:
            raise OSError("storage offline")
        return self.value

    def set(self, key, value):
        if self.fail_set:
            raise OSError("quota exceeded")
        self.writes += 1
        self.value = value

    def remove(self, key):
        self.value = None


class TestLoadAndSave(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.storage = ProductionDataStorage(self.store)

    def test_absent_slot_is_empty(self):
        self.assertEqual(self.storage.get_all(), [])
        result = self.storage.load()
        self.assertTrue(result)
        self.assertEqual(result.records, [])

    def test_save_all_writes_json_array(self):
        records = [make_record("1"), make_record("2")]
        self.assertTrue(self.storage.save_all(records))
        self.assertEqual(json.loads(self.store.get(KEY)), records)

    def test_non_ascii_survives(self):
        self.storage.add(make_record("1", product="製品A"))
        self.assertEqual(self.storage.get_all()[0]["product_id"], "製品A")

    def test_malformed_json_reads_as_empty(self):
        self.store.set(KEY, "{not json")
        self.assertEqual(self.storage.get_all(), [])
        result = self.storage.load()
        self.assertFalse(result)
        self.assertEqual(result.error, StorageErrorKind.MALFORMED_DATA)

    def test_non_list_payload_is_malformed(self):
        self.store.set(KEY, json.dumps({"id": "1"}))
        self.assertEqual(self.storage.get_all(), [])
        self.assertTrue(self.storage.load().is_malformed)

    def test_read_failure_is_unavailable(self):
        storage = ProductionDataStorage(BrokenStore(fail_get=True))
        self.assertEqual(storage.get_all(), [])
        self.assertTrue(storage.load().is_unavailable)

    def test_write_failure_is_reported_not_raised(self):
        storage = ProductionDataStorage(BrokenStore(fail_set=True))
        result = storage.save_all([make_record("1")])
        self.assertFalse(result)
        self.assertEqual(result.error, StorageErrorKind.STORAGE_UNAVAILABLE)


class TestAdd(unittest.TestCase):
    def setUp(self):
        self.storage = ProductionDataStorage(InMemoryKeyValueStore())

    def test_add_appends_at_end_once(self):
        self.storage.add(make_record("a"))
        record = make_record("b")
        result = self.storage.add(record)

        self.assertTrue(result)
        self.assertEqual(result.affected, 1)
        data = self.storage.get_all()
        self.assertEqual(data[-1], record)
        self.assertEqual(data.count(record), 1)

    def test_duplicate_ids_are_not_rejected(self):
        self.storage.add(make_record("1", quantity=1))
        self.assertTrue(self.storage.add(make_record("1", quantity=2)))
        self.assertEqual([r["quantity"] for r in self.storage.get_all()], [1, 2])

    def test_add_rejects_non_mapping(self):
        result = self.storage.add(["not", "a", "record"])
        self.assertFalse(result)
        self.assertEqual(result.error, StorageErrorKind.INVALID_RECORD)
        self.assertEqual(self.storage.get_all(), [])

    def test_add_returns_false_when_write_fails(self):
        storage = ProductionDataStorage(BrokenStore(fail_set=True))
        self.assertFalse(storage.add(make_record("1")))

    def test_add_over_malformed_slot_starts_fresh(self):
        store = InMemoryKeyValueStore({KEY: "[broken"})
        storage = ProductionDataStorage(store)
        record = make_record("1")

        result = storage.add(record)

        self.assertTrue(result)
        self.assertEqual(storage.get_all(), [record])
        self.assertEqual(store.get(KEY + ".corrupt"), "[broken")

    def test_delete_over_malformed_slot_saves_empty_list(self):
        store = InMemoryKeyValueStore({KEY: json.dumps({"id": "1"})})
        storage = ProductionDataStorage(store)

        result = storage.delete("x")

        self.assertTrue(result)
        self.assertEqual(result.affected, 0)
        self.assertEqual(json.loads(store.get(KEY)), [])
        self.assertEqual(store.get(KEY + ".corrupt"), '{"id": "1"}')

    def test_update_over_malformed_slot_is_not_found(self):
        store = InMemoryKeyValueStore({KEY: "[broken"})
        result = ProductionDataStorage(store).update(make_record("1"))
        self.assertTrue(result.is_not_found)


class TestUpdate(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryKeyValueStore()
        self.storage = ProductionDataStorage(self.store)
        for record_id in ("1", "2", "3"):
            self.storage.add(make_record(record_id))

    def test_update_replaces_in_place(self):
        changed = make_record("2", product="P-200", quantity=99)
        result = self.storage.update(changed)

        self.assertTrue(result)
        data = self.storage.get_all()
        self.assertEqual(len(data), 3)
        self.assertEqual([r["id"] for r in data], ["1", "2", "3"])
        self.assertEqual(data[1], changed)

    def test_update_only_first_match(self):
        self.storage.add(make_record("2", quantity=7))
        self.storage.update(make_record("2", quantity=50))
        quantities = [r["quantity"] for r in self.storage.get_all() if r["id"] == "2"]
        self.assertEqual(quantities, [50, 7])

    def test_update_missing_id_leaves_storage_unchanged(self):
        before = self.store.get(KEY)
        result = self.storage.update(make_record("404"))

        self.assertFalse(result)
        self.assertTrue(result.is_not_found)
        self.assertEqual(self.store.get(KEY), before)

    def test_update_missing_id_does_not_write(self):
        store = BrokenStore(value=json.dumps([make_record("1")]))
        storage = ProductionDataStorage(store)
        storage.update(make_record("2"))
        self.assertEqual(store.writes, 0)


class TestDelete(unittest.TestCase):
    def setUp(self):
        self.storage = ProductionDataStorage(InMemoryKeyValueStore())

    def test_delete_removes_all_matches(self):
        self.storage.add(make_record("1"))
        self.storage.add(make_record("2"))
        self.storage.add(make_record("1"))

        result = self.storage.delete("1")

        self.assertTrue(result)
        self.assertEqual(result.affected, 2)
        self.assertEqual([r["id"] for r in self.storage.get_all()], ["2"])

    def test_delete_absent_id_is_success_and_no_change(self):
        self.storage.add(make_record("1"))
        before = self.storage.get_all()

        result = self.storage.delete("missing")

        self.assertTrue(result)
        self.assertEqual(result.affected, 0)
        self.assertEqual(self.storage.get_all(), before)

    def test_delete_writes_even_without_match(self):
        store = BrokenStore(value="[]")
        ProductionDataStorage(store).delete("x")
        self.assertEqual(store.writes, 1)

    def test_delete_reports_write_failure(self):
        storage = ProductionDataStorage(BrokenStore(value="[]", fail_set=True))
        self.assertFalse(storage.delete("x"))


class TestScenario(unittest.TestCase):
    def test_add_add_delete(self):
        storage = ProductionDataStorage(InMemoryKeyValueStore())
        self.assertEqual(storage.get_all(), [])

        storage.add(make_record("1"))
        self.assertEqual(storage.get_all(), [make_record("1")])

        storage.add(make_record("2"))
        self.assertEqual([r["id"] for r in storage.get_all()], ["1", "2"])

        storage.delete("1")
        self.assertEqual(storage.get_all(), [make_record("2")])


class TestFilterByDateRange(unittest.TestCase):
    def setUp(self):
        self.storage = ProductionDataStorage(InMemoryKeyValueStore())
        self.storage.add(make_record("feb", day="2024-02-28"))
        self.storage.add(make_record("mar1", day="2024-03-01"))
        self.storage.add(make_record("mar1-evening", day="2024-03-01T22:30:00"))
        self.storage.add(make_record("mar2", day="2024-03-02"))
        self.storage.add(make_record("bad", day="someday"))

    def ids(self, records):
        return [r["id"] for r in records]

    def test_no_bounds_returns_everything_in_order(self):
        self.assertEqual(self.storage.filter_by_date_range(None, None), self.storage.get_all())
        self.assertEqual(self.storage.filter_by_date_range("", ""), self.storage.get_all())

    def test_end_bound_includes_whole_day(self):
        result = self.storage.filter_by_date_range("2024-03-01", "2024-03-01")
        self.assertEqual(self.ids(result), ["mar1", "mar1-evening"])

    def test_start_only(self):
        result = self.storage.filter_by_date_range("2024-03-01", None)
        self.assertEqual(self.ids(result), ["mar1", "mar1-evening", "mar2"])

    def test_end_only(self):
        result = self.storage.filter_by_date_range(None, "2024-02-29")
        self.assertEqual(self.ids(result), ["feb"])

    def test_results_fall_within_range(self):
        start, end = "2024-02-29", "2024-03-01"
        result = self.storage.filter_by_date_range(start, end)
        for record in result:
            self.assertGreaterEqual(record["date"][:10], start)
            self.assertLessEqual(record["date"][:10], end)

    def test_accepts_date_objects(self):
        result = self.storage.filter_by_date_range(date(2024, 3, 2), date(2024, 3, 2))
        self.assertEqual(self.ids(result), ["mar2"])

    def test_datetime_end_is_moved_to_end_of_day(self):
        result = self.storage.filter_by_date_range(None, datetime(2024, 3, 1, 8, 0))
        self.assertEqual(self.ids(result), ["feb", "mar1", "mar1-evening"])

    def test_unparsable_bound_gives_empty(self):
        self.assertEqual(self.storage.filter_by_date_range("not-a-date", None), [])

    def test_empty_storage(self):
        storage = ProductionDataStorage(InMemoryKeyValueStore())
        self.assertEqual(storage.filter_by_date_range("2024-01-01", "2024-12-31"), [])

    def test_filter_does_not_mutate(self):
        before = self.storage.get_all()
        self.storage.filter_by_date_range("2024-03-01", "2024-03-01")
        self.assertEqual(self.storage.get_all(), before)


class TestFilterByProductName(unittest.TestCase):
    def setUp(self):
        self.storage = ProductionDataStorage(InMemoryKeyValueStore())
        self.storage.add(make_record("1", product="Bracket-A"))
        self.storage.add(make_record("2", product="bracket-b"))
        self.storage.add(make_record("3", product="Housing"))

    def test_case_insensitive_substring(self):
        result = self.storage.filter_by_product_name("BRACKET")
        self.assertEqual([r["id"] for r in result], ["1", "2"])

    def test_empty_term_returns_everything(self):
        self.assertEqual(self.storage.filter_by_product_name(""), self.storage.get_all())

    def test_whitespace_term_returns_everything(self):
        self.assertEqual(self.storage.filter_by_product_name("   "), self.storage.get_all())

    def test_no_match(self):
        self.assertEqual(self.storage.filter_by_product_name("gear"), [])

    def test_read_failure_gives_empty(self):
        storage = ProductionDataStorage(BrokenStore(fail_get=True))
        self.assertEqual(storage.filter_by_product_name("x"), [])

    def test_missing_product_field_does_not_match(self):
        self.storage.add({"id": "4", "date": "2024-03-01"})
        self.assertEqual([r["id"] for r in self.storage.filter_by_product_name("h")], ["3"])


if __name__ == "__main__":
    unittest.main()
