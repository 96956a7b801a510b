import unittest

from glucoguide.leaderboard import award_points, get_leaderboard, reconcile_leaderboard, sync_leaderboard_entry
from tests.helpers import AppTestCase


class LeaderboardTestCase(AppTestCase):
    def test_ranks_are_positional_including_ties(self):
        for user_id, points in (("a", 250), ("b", 300), ("c", 250)):
            self.make_user(user_id, display_name=user_id.upper())
            sync_leaderboard_entry(self.store, user_id, total_points=points)

        board = get_leaderboard(self.store)

        self.assertEqual([row["rank"] for row in board], [1, 2, 3])
        self.assertEqual([row["total_points"] for row in board], [300, 250, 250])
        self.assertEqual(board[0]["name"], "B")
        self.assertEqual([row["user_id"] for row in board], ["b", "a", "c"])

    def test_tied_order_is_stable_regardless_of_write_order(self):
        for user_id in ("zed", "amy", "kai"):
            self.make_user(user_id)
            sync_leaderboard_entry(self.store, user_id, total_points=120)
        sync_leaderboard_entry(self.store, "amy", current_streak=2)

        first = [row["user_id"] for row in get_leaderboard(self.store)]
        second = [row["user_id"] for row in get_leaderboard(self.store)]

        self.assertEqual(first, ["amy", "kai", "zed"])
        self.assertEqual(first, second)

    def test_limit(self):
        for index in range(5):
            self.make_user(f"user-{index}")
            sync_leaderboard_entry(self.store, f"user-{index}", total_points=index * 10)

        board = get_leaderboard(self.store, limit=2)
        self.assertEqual([row["user_id"] for row in board], ["user-4", "user-3"])

    def test_sync_merges_only_given_fields(self):
        self.make_user("u1", display_name="Asha")
        sync_leaderboard_entry(self.store, "u1", total_points=40, current_streak=3, longest_streak=5)

        sync_leaderboard_entry(self.store, "u1", total_points=55)

        entry = self.store.get_document("leaderboard", "u1")
        self.assertEqual(entry["total_points"], 55)
        self.assertEqual(entry["current_streak"], 3)
        self.assertEqual(entry["longest_streak"], 5)
        self.assertEqual(entry["name"], "Asha")
        self.assertIsNone(sync_leaderboard_entry(self.store, "u1"))

    def test_missing_name_shows_anonymous(self):
        self.make_user("u1", display_name=None)

        self.assertEqual(get_leaderboard(self.store)[0]["name"], "Anonymous")

    def test_award_points_updates_profile_and_entry(self):
        self.make_user("u1")

        user = award_points(self.store, "u1", 10)
        user = award_points(self.store, "u1", 5)

        self.assertEqual(user["total_points"], 15)
        self.assertEqual(user["current_points"], 15)
        self.assertEqual(self.store.get_document("leaderboard", "u1")["total_points"], 15)

    def test_reconcile_rewrites_entries_from_profiles(self):
        self.make_user("u1", display_name="Asha")
        self.make_user("u2", display_name="Ravi")
        self.store.set_document("users", "u1", {"total_points": 90, "daily_streak": 4, "longest_streak": 6})
        sync_leaderboard_entry(self.store, "u1", total_points=12, name="stale")
        self.store.delete_document("leaderboard", "u2")

        self.assertEqual(reconcile_leaderboard(self.store), 2)

        entry = self.store.get_document("leaderboard", "u1")
        self.assertEqual(entry["total_points"], 90)
        self.assertEqual(entry["current_streak"], 4)
        self.assertEqual(entry["longest_streak"], 6)
        self.assertEqual(entry["name"], "Asha")
        self.assertIsNotNone(self.store.get_document("leaderboard", "u2"))


if __name__ == "__main__":
    unittest.main()
