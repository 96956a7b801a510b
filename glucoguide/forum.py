from datetime import datetime

from flask import current_app

from glucoguide.errors import InvalidInputError
from glucoguide.leaderboard import award_points
from glucoguide.profiles import require_user

THREADS_COLLECTION = "forum_threads"
REPLIES_COLLECTION = "forum_replies"
LIKES_COLLECTION = "forum_likes"

FORUM_CATEGORIES = ("progress", "recipes", "support", "questions", "tips", "success", "general")
LIKEABLE_COLLECTIONS = {"thread": THREADS_COLLECTION, "reply": REPLIES_COLLECTION}

THREAD_POINTS = 10
REPLY_POINTS = 5
MAX_TAGS = 5
TITLE_LENGTH = (5, 100)
CONTENT_LENGTH = (10, 2000)


def parse_tags(raw_value) -> list[str]:
    if isinstance(raw_value, str):
        raw_value = raw_value.split(",")
    tags = [str(tag).strip() for tag in raw_value or [] if str(tag).strip()]
    return tags[:MAX_TAGS]


def _check_length(label: str, value: str, bounds: tuple[int, int]) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"Please enter a {label}.")
    low, high = bounds
    if len(text) < low:
        raise InvalidInputError(f"{label.capitalize()} must be at least {low} characters long.")
    if len(text) > high:
        raise InvalidInputError(f"{label.capitalize()} must be at most {high} characters long.")
    return text


def _author_name(user: dict) -> str:
    return user.get("display_name") or "Anonymous"


def create_thread(store, user_id, title: str, content: str, category: str = "general", tags=None) -> dict:
    title = _check_length("title", title, TITLE_LENGTH)
    content = _check_length("content", content, CONTENT_LENGTH)
    category = (category or "general").strip().lower()
    if category not in FORUM_CATEGORIES:
        raise InvalidInputError(f"Unknown forum category: {category!r}")

    user = require_user(store, user_id)
    thread = store.add_document(
        THREADS_COLLECTION,
        {
            "user_id": user_id,
            "author_name": _author_name(user),
            "category": category,
            "title": title,
            "content": content,
            "tags": parse_tags(tags),
        },
    )
    user = award_points(store, user_id, THREAD_POINTS)
    current_app.logger.info("User %s created thread %s in %s", user_id, thread["id"], category)
    return {
        "success": True,
        "thread": thread,
        "points_earned": THREAD_POINTS,
        "total_points": user.get("total_points") or 0,
    }


def list_threads(store, category: str = "all", limit: int = 50) -> list[dict]:
    category = (category or "all").strip().lower()
    if category == "all":
        return store.query_equal(THREADS_COLLECTION, order_by="created_at", descending=True, limit=limit)
    return store.query_equal(THREADS_COLLECTION, "category", category, order_by="created_at", descending=True, limit=limit)


def search_threads(store, term: str, limit: int = 50) -> list[dict]:
    needle = (term or "").strip().lower()
    if not needle:
        return []

    # Full scan; thread volume is small enough that there is no search index.
    matches = []
    for thread in store.query_equal(THREADS_COLLECTION, order_by="created_at", descending=True):
        haystack = [thread.get("title") or "", thread.get("content") or "", *(thread.get("tags") or [])]
        if any(needle in text.lower() for text in haystack):
            matches.append(thread)
            if len(matches) >= limit:
                break
    return matches


def get_thread_with_replies(store, thread_id) -> dict | None:
    thread = store.get_document(THREADS_COLLECTION, thread_id)
    if thread is None:
        return None
    replies = store.query_equal(REPLIES_COLLECTION, "thread_id", thread_id, order_by="created_at")
    return {"thread": thread, "replies": replies}


def reply_to_thread(store, user_id, thread_id, content: str) -> dict:
    content = _check_length("reply", content, (1, CONTENT_LENGTH[1]))
    thread = store.get_document(THREADS_COLLECTION, thread_id)
    if thread is None:
        return {"success": False, "error": "thread_not_found"}

    user = require_user(store, user_id)
    reply = store.add_document(
        REPLIES_COLLECTION,
        {"thread_id": thread_id, "user_id": user_id, "author_name": _author_name(user), "content": content},
    )
    store.increment(THREADS_COLLECTION, thread_id, {"replies": 1})
    store.set_document(
        THREADS_COLLECTION,
        thread_id,
        {"last_reply_by": _author_name(user), "last_reply_at": datetime.utcnow()},
        merge=True,
    )
    user = award_points(store, user_id, REPLY_POINTS)
    current_app.logger.info("User %s replied to thread %s", user_id, thread_id)
    return {
        "success": True,
        "reply": reply,
        "points_earned": REPLY_POINTS,
        "total_points": user.get("total_points") or 0,
    }


def like_id(item_type: str, item_id, user_id) -> str:
    return f"{item_type}:{item_id}:{user_id}"


def toggle_like(store, user_id, item_id, item_type: str) -> dict:
    item_type = (item_type or "").strip().lower()
    collection = LIKEABLE_COLLECTIONS.get(item_type)
    if collection is None:
        raise InvalidInputError(f"Cannot like items of type {item_type!r}")
    if item_id is None:
        raise InvalidInputError("An item id is required.")

    require_user(store, user_id)
    if store.get_document(collection, item_id) is None:
        return {"success": False, "error": f"{item_type}_not_found"}

    key = like_id(item_type, item_id, user_id)
    if store.get_document(LIKES_COLLECTION, key) is not None:
        store.delete_document(LIKES_COLLECTION, key)
        store.increment(collection, item_id, {"likes": -1})
        liked = False
    else:
        store.set_document(
            LIKES_COLLECTION,
            key,
            {"user_id": user_id, "item_id": item_id, "item_type": item_type},
            merge=False,
        )
        store.increment(collection, item_id, {"likes": 1})
        liked = True

    item = store.get_document(collection, item_id)
    return {"success": True, "liked": liked, "likes": max(0, item.get("likes") or 0)}
