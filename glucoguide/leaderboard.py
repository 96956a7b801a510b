from flask import current_app

LEADERBOARD_COLLECTION = "leaderboard"


def leaderboard_fields_from_profile(user: dict) -> dict:
    return {
        "name": user.get("display_name"),
        "total_points": user.get("total_points") or 0,
        "current_streak": user.get("daily_streak") or 0,
        "longest_streak": user.get("longest_streak") or 0,
    }


def sync_leaderboard_entry(store, user_id, *, name=None, total_points=None, current_streak=None, longest_streak=None):
    """Merge the provided fields into the user's leaderboard entry, creating it if needed.

    Fields left as None are not written. This is a second, independent write
    after the profile update; callers do not get atomicity across the two.
    """
    fields = {
        key: value
        for key, value in {
            "name": name,
            "total_points": total_points,
            "current_streak": current_streak,
            "longest_streak": longest_streak,
        }.items()
        if value is not None
    }
    if not fields:
        return None
    return store.set_document(LEADERBOARD_COLLECTION, user_id, fields, merge=True)


def get_leaderboard(store, limit: int | None = 20) -> list[dict]:
    rows = store.query_equal(LEADERBOARD_COLLECTION, order_by="total_points", descending=True, limit=limit)
    return [
        {
            "rank": position,
            "user_id": row["id"],
            "name": row.get("name") or "Anonymous",
            "total_points": row.get("total_points") or 0,
            "current_streak": row.get("current_streak") or 0,
            "longest_streak": row.get("longest_streak") or 0,
        }
        for position, row in enumerate(rows, start=1)
    ]


def award_points(store, user_id, points: int) -> dict:
    store.increment("users", user_id, {"total_points": points, "current_points": points})
    user = store.get_document("users", user_id)
    sync_leaderboard_entry(store, user_id, total_points=user.get("total_points") or 0)
    return user


def reconcile_leaderboard(store) -> int:
    """Rewrite every leaderboard entry from its user profile."""
    users = store.query_equal("users")
    for user in users:
        store.set_document(LEADERBOARD_COLLECTION, user["id"], leaderboard_fields_from_profile(user), merge=True)
    current_app.logger.info("Reconciled %s leaderboard entries", len(users))
    return len(users)
