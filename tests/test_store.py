import unittest
from unittest import mock

from sqlalchemy.exc import OperationalError

from glucoguide import db
from glucoguide.errors import CollaboratorFailure, InvalidInputError
from tests.helpers import AppTestCase


class SqlDocumentStoreTestCase(AppTestCase):
    def test_set_document_creates_with_defaults(self):
        user = self.store.set_document("users", "u1", {"display_name": "Asha"})

        self.assertEqual(user["id"], "u1")
        self.assertEqual(user["display_name"], "Asha")
        self.assertEqual(user["target_ppbs"], 140.0)
        self.assertEqual(user["total_points"], 0)

    def test_merge_keeps_other_fields(self):
        self.store.set_document("users", "u1", {"display_name": "Asha", "age": 40})

        user = self.store.set_document("users", "u1", {"age": 41}, merge=True)

        self.assertEqual(user["age"], 41)
        self.assertEqual(user["display_name"], "Asha")

    def test_replace_resets_other_fields(self):
        self.store.set_document("users", "u1", {"display_name": "Asha", "total_points": 70, "daily_calories": 1800})

        user = self.store.set_document("users", "u1", {"age": 41}, merge=False)

        self.assertEqual(user["age"], 41)
        self.assertIsNone(user["display_name"])
        self.assertEqual(user["total_points"], 0)
        self.assertEqual(user["daily_calories"], 2000)

    def test_unknown_fields_and_collections_rejected(self):
        with self.assertRaises(InvalidInputError):
            self.store.set_document("users", "u1", {"favourite_colour": "blue"})
        with self.assertRaises(InvalidInputError):
            self.store.get_document("recipes", 1)

    def test_increment_is_relative(self):
        self.store.set_document("users", "u1", {"total_points": 5, "consumed_carbs": 10.5})

        self.assertTrue(self.store.increment("users", "u1", {"total_points": 7, "consumed_carbs": 2.25}))

        user = self.store.get_document("users", "u1")
        self.assertEqual(user["total_points"], 12)
        self.assertAlmostEqual(user["consumed_carbs"], 12.75)

    def test_increment_missing_document(self):
        self.assertFalse(self.store.increment("users", "nobody", {"total_points": 1}))

    def test_add_and_delete(self):
        self.store.set_document("users", "u1", {})
        thread = self.store.add_document(
            "forum_threads", {"user_id": "u1", "category": "general", "title": "Hello all", "content": "First post!"}
        )

        self.assertIsInstance(thread["id"], int)
        self.assertEqual(thread["likes"], 0)
        self.assertTrue(self.store.delete_document("forum_threads", thread["id"]))
        self.assertFalse(self.store.delete_document("forum_threads", thread["id"]))
        self.assertIsNone(self.store.get_document("forum_threads", thread["id"]))

    def test_query_equal_filters_orders_and_limits(self):
        for user_id, points in (("a", 30), ("b", 10), ("c", 20)):
            self.store.set_document("users", user_id, {"total_points": points, "gender": "female"})
        self.store.set_document("users", "d", {"total_points": 99, "gender": "male"})

        rows = self.store.query_equal("users", "gender", "female", order_by="total_points", descending=True, limit=2)

        self.assertEqual([row["id"] for row in rows], ["a", "c"])
        self.assertEqual(len(self.store.query_equal("users")), 4)

    def test_query_equal_extra_filters(self):
        self.store.set_document("users", "u1", {"gender": "female", "activity_level": "light"})
        self.store.set_document("users", "u2", {"gender": "female", "activity_level": "high"})
        self.store.set_document("users", "u3", {"gender": "male", "activity_level": "light"})

        rows = self.store.query_equal("users", "gender", "female", filters={"activity_level": "light"})

        self.assertEqual([row["id"] for row in rows], ["u1"])
        with self.assertRaises(InvalidInputError):
            self.store.query_equal("users", filters={"shoe_size": 9})

    def test_ties_are_ordered_by_id(self):
        for user_id in ("m", "c", "x", "a"):
            self.store.set_document("users", user_id, {"total_points": 50})

        rows = self.store.query_equal("users", order_by="total_points", descending=True)

        self.assertEqual([row["id"] for row in rows], ["a", "c", "m", "x"])

    def test_store_errors_become_collaborator_failures(self):
        with mock.patch.object(db.session, "get", side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))):
            with self.assertRaises(CollaboratorFailure):
                self.store.get_document("users", "u1")
            with self.assertRaises(CollaboratorFailure):
                self.store.set_document("users", "u1", {"age": 40})


if __name__ == "__main__":
    unittest.main()
