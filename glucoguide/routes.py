import math
from datetime import date, datetime

from flask import Blueprint, current_app, jsonify, request

from glucoguide.clock import get_clock
from glucoguide.errors import CollaboratorFailure, InvalidInputError, UserNotFoundError
from glucoguide.food_catalog import (
    compute_nutrition,
    diabetic_friendly_foods,
    food_suggestions,
    load_reference_foods,
    search_foods,
    seed_reference_foods_if_needed,
)
from glucoguide.forum import (
    create_thread,
    get_thread_with_replies,
    list_threads,
    reply_to_thread,
    search_threads,
    toggle_like,
)
from glucoguide.leaderboard import get_leaderboard
from glucoguide.ledger import get_daily_progress, get_food_logs_for_day, log_meal
from glucoguide.profiles import (
    create_user_profile,
    profile_summary,
    record_blood_sugar,
    require_user,
    update_profile,
)
from glucoguide.store import get_store

bp = Blueprint("api", __name__)


def to_json_ready(value):
    if isinstance(value, dict):
        return {key: to_json_ready(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_ready(item) for item in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def respond(payload, status: int = 200):
    return jsonify(to_json_ready(payload)), status


def request_json() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_int(value, default=None):
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Expected an integer, got {value!r}.") from None


def parse_day(value):
    if not value:
        return get_clock().today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidInputError("Dates must use YYYY-MM-DD.") from None


def reference_foods(store):
    if current_app.config.get("SEED_REFERENCE_FOODS"):
        seed_reference_foods_if_needed()
    return load_reference_foods(store)


@bp.app_errorhandler(InvalidInputError)
def handle_invalid_input(exc):
    return respond({"success": False, "error": "invalid_input", "message": str(exc)}, 400)


@bp.app_errorhandler(UserNotFoundError)
def handle_user_not_found(exc):
    return respond({"success": False, "error": "user_not_found", "message": str(exc)}, 404)


@bp.app_errorhandler(CollaboratorFailure)
def handle_store_failure(exc):
    current_app.logger.error("Request failed on the document store: %s", exc)
    return respond({"success": False, "error": "store_unavailable", "message": str(exc)}, 503)


@bp.post("/users/<user_id>")
def user_create(user_id: str):
    data = request_json()
    user = create_user_profile(get_store(), user_id, data.get("display_name"), data.get("email"))
    return respond(profile_summary(user), 201)


@bp.get("/users/<user_id>")
def user_detail(user_id: str):
    return respond(profile_summary(require_user(get_store(), user_id)))


@bp.patch("/users/<user_id>/profile")
def user_profile_update(user_id: str):
    user = update_profile(get_store(), user_id, request_json(), get_clock())
    return respond(profile_summary(user))


@bp.post("/users/<user_id>/blood-sugar")
def blood_sugar_record(user_id: str):
    data = request_json()
    result = record_blood_sugar(get_store(), user_id, data.get("fbs"), data.get("ppbs"), get_clock())
    return respond({"success": True, "user": profile_summary(result["user"]), "targets": result["targets"]})


@bp.post("/users/<user_id>/meals")
def meal_log(user_id: str):
    data = request_json()
    store = get_store()
    result = log_meal(
        store,
        user_id,
        data.get("food_name"),
        data.get("quantity"),
        data.get("meal_type"),
        get_clock(),
        foods=reference_foods(store),
    )
    return respond(result, 201 if result["success"] else 404)


@bp.get("/users/<user_id>/meals")
def meal_list(user_id: str):
    store = get_store()
    require_user(store, user_id)
    day = parse_day(request.args.get("day"))
    return respond({"date": day, "entries": get_food_logs_for_day(store, user_id, day)})


@bp.get("/users/<user_id>/progress")
def daily_progress(user_id: str):
    return respond(get_daily_progress(get_store(), user_id, get_clock()))


@bp.get("/foods/search")
def food_search():
    query = (request.args.get("q") or "").strip()
    if len(query) < 2:
        return respond({"results": [], "message": "Type at least 2 characters."})
    limit = parse_int(request.args.get("limit"), 10)
    return respond({"results": search_foods(query, reference_foods(get_store()), limit=limit)})


@bp.get("/foods/suggestions")
def food_suggestion_list():
    query = request.args.get("q")
    return respond({"suggestions": food_suggestions(query, reference_foods(get_store()))})


@bp.get("/foods/diabetic-friendly")
def food_diabetic_friendly():
    limit = parse_int(request.args.get("limit"), 20)
    return respond({"results": diabetic_friendly_foods(reference_foods(get_store()), limit=limit)})


@bp.get("/foods/nutrition")
def food_nutrition_preview():
    name = request.args.get("name")
    try:
        grams = float(request.args.get("grams") or 100)
    except ValueError:
        raise InvalidInputError("grams must be a number.") from None
    if not math.isfinite(grams) or grams <= 0:
        raise InvalidInputError("grams must be a positive number.")
    nutrition = compute_nutrition(name, grams, reference_foods(get_store()))
    if nutrition is None:
        return respond({"success": False, "error": "food_not_found"}, 404)
    return respond({"success": True, "nutrition": nutrition})


@bp.get("/leaderboard")
def leaderboard():
    limit = parse_int(request.args.get("limit"), current_app.config.get("LEADERBOARD_DEFAULT_LIMIT", 20))
    return respond({"leaderboard": get_leaderboard(get_store(), limit=limit)})


@bp.get("/forum/threads")
def forum_thread_list():
    store = get_store()
    term = (request.args.get("q") or "").strip()
    if term:
        threads = search_threads(store, term)
    else:
        threads = list_threads(store, request.args.get("category") or "all")
    return respond({"threads": threads})


@bp.post("/forum/threads")
def forum_thread_create():
    data = request_json()
    result = create_thread(
        get_store(),
        data.get("user_id"),
        data.get("title"),
        data.get("content"),
        data.get("category") or "general",
        data.get("tags"),
    )
    return respond(result, 201)


@bp.get("/forum/threads/<int:thread_id>")
def forum_thread_detail(thread_id: int):
    data = get_thread_with_replies(get_store(), thread_id)
    if data is None:
        return respond({"success": False, "error": "thread_not_found"}, 404)
    return respond(data)


@bp.post("/forum/threads/<int:thread_id>/replies")
def forum_thread_reply(thread_id: int):
    data = request_json()
    result = reply_to_thread(get_store(), data.get("user_id"), thread_id, data.get("content"))
    return respond(result, 201 if result["success"] else 404)


@bp.post("/forum/likes")
def forum_like_toggle():
    data = request_json()
    result = toggle_like(get_store(), data.get("user_id"), parse_int(data.get("item_id")), data.get("item_type"))
    return respond(result, 200 if result["success"] else 404)
