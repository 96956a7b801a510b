import math
from datetime import timedelta

from flask import current_app

from glucoguide.errors import InvalidInputError
from glucoguide.food_catalog import compute_nutrition, load_reference_foods
from glucoguide.leaderboard import sync_leaderboard_entry
from glucoguide.profiles import USERS_COLLECTION, require_user

FOOD_LOGS_COLLECTION = "food_logs"

MEAL_POINTS = {
    "breakfast": 15,
    "lunch": 13,
    "dinner": 13,
    "snack": 12,
}
DEFAULT_MEAL_POINTS = 10
FIRST_MEAL_BONUS = 5
STREAK_MEALS_PER_DAY = 2

# nutrient -> profile accumulator
CONSUMED_FIELDS = {
    "calories": "consumed_calories",
    "carbs": "consumed_carbs",
    "protein": "consumed_protein",
    "fat": "consumed_fat",
}
TARGET_FIELDS = {
    "calories": "daily_calories",
    "carbs": "target_carbs",
    "protein": "target_protein",
    "fat": "target_fat",
}


def meal_points(meal_type: str | None, meals_logged_today: int) -> int:
    points = MEAL_POINTS.get((meal_type or "").strip().lower(), DEFAULT_MEAL_POINTS)
    if not meals_logged_today:
        points += FIRST_MEAL_BONUS
    return points


def next_streak(daily_streak: int, last_meal_date, meal_count: int, today):
    """Return (daily_streak, last_meal_date) after today's meal_count-th meal.

    The streak only moves when a day reaches STREAK_MEALS_PER_DAY meals, and
    last_meal_date records the last day that did.
    """
    if meal_count < STREAK_MEALS_PER_DAY:
        return daily_streak, last_meal_date

    if last_meal_date == today - timedelta(days=1):
        daily_streak += 1
    elif last_meal_date != today:
        daily_streak = 1
    return daily_streak, today


def apply_daily_rollover(store, user: dict, today) -> dict:
    if user.get("last_reset_date") == today:
        return user

    fields = {field: 0.0 for field in CONSUMED_FIELDS.values()}
    fields["meals_logged_today"] = 0
    fields["last_reset_date"] = today
    current_app.logger.debug("Daily rollover for user %s (last reset %s)", user["id"], user.get("last_reset_date"))
    return store.set_document(USERS_COLLECTION, user["id"], fields, merge=True)


def consumed_snapshot(user: dict) -> dict:
    return {nutrient: round(user.get(field) or 0, 2) for nutrient, field in CONSUMED_FIELDS.items()}


def log_meal(store, user_id, food_name: str, grams, meal_type: str, clock, foods=None) -> dict:
    try:
        grams = float(grams)
    except (TypeError, ValueError):
        raise InvalidInputError("Quantity must be a number of grams.") from None
    if not math.isfinite(grams) or grams <= 0:
        raise InvalidInputError("Quantity must be a positive number of grams.")

    user = require_user(store, user_id)
    if foods is None:
        foods = load_reference_foods(store)

    nutrition = compute_nutrition(food_name, grams, foods)
    if nutrition is None:
        return {
            "success": False,
            "error": "food_not_found",
            "message": f"Food '{food_name}' not found in database. Try a different name.",
        }

    today = clock.today()
    user = apply_daily_rollover(store, user, today)

    meal_type = (meal_type or "").strip().lower() or "other"
    points = meal_points(meal_type, user.get("meals_logged_today") or 0)

    entry = store.add_document(
        FOOD_LOGS_COLLECTION,
        {
            "user_id": user_id,
            "food_name": nutrition["food_name"],
            "quantity_g": grams,
            "calories": nutrition["calories"],
            "carbs": nutrition["carbs"],
            "protein": nutrition["protein"],
            "fat": nutrition["fat"],
            "sugar": nutrition["sugar"],
            "fiber": nutrition["fiber"],
            "sodium": nutrition["sodium"],
            "meal_type": meal_type,
            "points_earned": points,
            "log_date": today,
        },
    )

    deltas = {field: nutrition[nutrient] for nutrient, field in CONSUMED_FIELDS.items()}
    deltas.update({"meals_logged_today": 1, "total_points": points, "current_points": points})
    store.increment(USERS_COLLECTION, user_id, deltas)

    user = store.get_document(USERS_COLLECTION, user_id)
    daily_streak, last_meal_date = next_streak(
        user.get("daily_streak") or 0,
        user.get("last_meal_date"),
        user.get("meals_logged_today") or 0,
        today,
    )
    longest_streak = max(user.get("longest_streak") or 0, daily_streak)
    user = store.set_document(
        USERS_COLLECTION,
        user_id,
        {"daily_streak": daily_streak, "longest_streak": longest_streak, "last_meal_date": last_meal_date},
        merge=True,
    )

    sync_leaderboard_entry(
        store,
        user_id,
        total_points=user.get("total_points") or 0,
        current_streak=daily_streak,
        longest_streak=longest_streak,
    )

    current_app.logger.info(
        "User %s logged %sg of %s (%s): +%s points, streak %s",
        user_id,
        grams,
        nutrition["food_name"],
        meal_type,
        points,
        daily_streak,
    )
    return {
        "success": True,
        "entry_id": entry["id"],
        "points_earned": points,
        "total_points": user.get("total_points") or 0,
        "current_points": user.get("current_points") or 0,
        "daily_streak": daily_streak,
        "current_streak": daily_streak,
        "longest_streak": longest_streak,
        "meals_logged_today": user.get("meals_logged_today") or 0,
        "nutrition": nutrition,
        "consumed": consumed_snapshot(user),
    }


def get_daily_progress(store, user_id, clock) -> dict:
    user = require_user(store, user_id)
    today = clock.today()
    user = apply_daily_rollover(store, user, today)

    progress = {"date": today, "meals_logged_today": user.get("meals_logged_today") or 0}
    for nutrient, consumed_field in CONSUMED_FIELDS.items():
        consumed = round(user.get(consumed_field) or 0, 2)
        target = user.get(TARGET_FIELDS[nutrient]) or 0
        progress[nutrient] = {
            "consumed": consumed,
            "target": target,
            "remaining": round(max(0, target - consumed), 2),
            "percent": round(consumed / target * 100, 1) if target else 0.0,
        }
    progress["daily_streak"] = user.get("daily_streak") or 0
    progress["total_points"] = user.get("total_points") or 0
    return progress


def get_food_logs_for_day(store, user_id, day) -> list[dict]:
    return store.query_equal(
        FOOD_LOGS_COLLECTION,
        "user_id",
        user_id,
        filters={"log_date": day},
        order_by="created_at",
        descending=True,
    )
