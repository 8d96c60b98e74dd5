import unittest

from row_store import RowStore
from table_errors import DuplicateRowError


class RowStoreTests(unittest.TestCase):
    def _store(self):
        return RowStore(
            [
                {"id": "1", "name": "Ann", "age": 30},
                {"id": "2", "name": "Bob", "age": 25},
            ]
        )

    def test_get_returns_copy(self):
        store = self._store()
        row = store.get("1")
        row["name"] = "Changed"
        self.assertEqual(store.get("1")["name"], "Ann")
        self.assertIsNone(store.get("nope"))

    def test_update_merges_only_supplied_fields(self):
        store = self._store()
        self.assertTrue(store.update("1", {"age": 31, "nickname": "A"}))
        self.assertEqual(store.get("1"), {"id": "1", "name": "Ann", "age": 31, "nickname": "A"})

    def test_update_cannot_change_id(self):
        store = self._store()
        store.update("1", {"id": "99", "name": "Ann B"})
        self.assertEqual(store.get("1")["name"], "Ann B")
        self.assertNotIn("99", store)

    def test_update_and_delete_unknown_are_noops(self):
        store = self._store()
        self.assertFalse(store.update("x", {"name": "Zed"}))
        self.assertFalse(store.delete("x"))
        self.assertEqual(len(store), 2)

    def test_delete_keeps_order_and_index(self):
        store = RowStore([{"id": str(i)} for i in range(5)])
        store.delete("1")
        self.assertEqual(store.ids(), ["0", "2", "3", "4"])
        self.assertTrue(store.update("4", {"x": 1}))
        self.assertEqual(store.get("4")["x"], 1)

    def test_add_rejects_duplicate_id(self):
        store = self._store()
        with self.assertRaises(DuplicateRowError):
            store.add({"id": "1", "name": "Dup"})

    def test_add_generates_missing_id(self):
        store = RowStore()
        row = store.add({"name": "New"})
        self.assertTrue(row["id"].startswith("row-"))
        self.assertIn(row["id"], store)

    def test_set_all_replaces_everything(self):
        store = self._store()
        store.set_all([{"id": "a"}])
        self.assertEqual(store.ids(), ["a"])
        with self.assertRaises(DuplicateRowError):
            store.set_all([{"id": "b"}, {"id": "b"}])
        self.assertEqual(store.ids(), ["a"])

    def test_iteration_yields_copies_in_order(self):
        store = self._store()
        self.assertEqual([row["name"] for row in store], ["Ann", "Bob"])
        for row in store:
            row["name"] = "X"
        self.assertEqual(store.get("2")["name"], "Bob")


if __name__ == "__main__":
    unittest.main()
