import math

from flask import current_app

from glucoguide.errors import InvalidInputError, UserNotFoundError
from glucoguide.leaderboard import leaderboard_fields_from_profile, sync_leaderboard_entry
from glucoguide.targets import (
    ACTIVITY_FACTORS,
    allocate_macros,
    bmi_category,
    calculate_bmi,
    compute_progressive_targets,
    estimate_daily_calories,
)

USERS_COLLECTION = "users"

GENDER_OPTIONS = ("male", "female", "other", "prefer-not-to-say")
DIABETES_TYPES = ("type1", "type2", "gestational", "prediabetes", "none")
MEDICATION_STATUSES = ("insulin-only", "oral-medication", "insulin-and-oral", "diet-exercise", "none")

NUMERIC_RANGES = {
    "age": (1, 120),
    "height_cm": (50, 300),
    "weight_kg": (20, 500),
    "hba1c_level": (4, 15),
    "current_fbs": (50, 500),
    "current_ppbs": (50, 500),
}
CHOICE_FIELDS = {
    "gender": GENDER_OPTIONS,
    "activity_level": tuple(ACTIVITY_FACTORS),
    "diabetes_type": DIABETES_TYPES,
    "medication_status": MEDICATION_STATUSES,
}
TEXT_FIELDS = {"display_name": 255, "email": 255}
REQUIRED_FOR_TARGETS = ("height_cm", "weight_kg", "age", "gender", "activity_level")


def require_user(store, user_id) -> dict:
    if not user_id:
        raise InvalidInputError("A user id is required.")
    user = store.get_document(USERS_COLLECTION, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def missing_required_fields(user: dict) -> list[str]:
    return [name for name in REQUIRED_FOR_TARGETS if user.get(name) in (None, "")]


def create_user_profile(store, user_id, display_name: str | None = None, email: str | None = None) -> dict:
    if not user_id:
        raise InvalidInputError("A user id is required.")

    existing = store.get_document(USERS_COLLECTION, user_id)
    if existing is not None:
        return existing

    user = store.set_document(
        USERS_COLLECTION,
        user_id,
        {"display_name": display_name, "email": email, "has_profile": False},
        merge=True,
    )
    sync_leaderboard_entry(store, user_id, **leaderboard_fields_from_profile(user))
    current_app.logger.info("Created profile for user %s", user_id)
    return user


def _parse_number(name: str, value):
    try:
        number = int(value) if name == "age" else float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInputError(f"{name} must be a number.") from None
    low, high = NUMERIC_RANGES[name]
    if not math.isfinite(number) or number < low or number > high:
        raise InvalidInputError(f"{name} must be between {low} and {high}.")
    return number


def validate_profile_fields(fields: dict) -> dict:
    cleaned = {}
    for name, value in (fields or {}).items():
        if name in NUMERIC_RANGES:
            cleaned[name] = None if value in (None, "") else _parse_number(name, value)
        elif name in CHOICE_FIELDS:
            choice = str(value or "").strip().lower()
            if choice and choice not in CHOICE_FIELDS[name]:
                raise InvalidInputError(f"Invalid {name}: {value!r}")
            cleaned[name] = choice or None
        elif name in TEXT_FIELDS:
            text = str(value or "").strip()[: TEXT_FIELDS[name]]
            cleaned[name] = text or None
        else:
            raise InvalidInputError(f"Field {name!r} cannot be updated.")
    return cleaned


def _initial_reading(user: dict) -> dict | None:
    if user.get("initial_fbs") is None and user.get("initial_ppbs") is None:
        return None
    return {
        "fbs": user.get("initial_fbs"),
        "ppbs": user.get("initial_ppbs"),
        "date_recorded": user.get("initial_recorded_on"),
    }


def recompute_targets(user: dict, today) -> dict:
    """Derived target fields for a profile snapshot; only changed targets move target_set_date."""
    targets = compute_progressive_targets(_initial_reading(user), user.get("current_fbs"), user.get("current_ppbs"))
    fields = {"target_fbs": targets["target_fbs"], "target_ppbs": targets["target_ppbs"]}
    if (
        targets["target_fbs"] != user.get("target_fbs")
        or targets["target_ppbs"] != user.get("target_ppbs")
        or user.get("target_set_date") is None
    ):
        fields["target_set_date"] = today

    daily_calories = user.get("daily_calories")
    if not missing_required_fields(user):
        estimate = estimate_daily_calories(
            user["height_cm"],
            user["weight_kg"],
            user["age"],
            user["gender"],
            user["activity_level"],
            user.get("current_fbs"),
            user.get("current_ppbs"),
        )
        daily_calories = estimate["daily_calories"]
        fields["daily_calories"] = daily_calories

    fields.update(
        allocate_macros(
            daily_calories,
            user.get("current_fbs"),
            user.get("current_ppbs"),
            targets["target_fbs"],
            targets["target_ppbs"],
        )
    )
    return fields


def _apply_reading_fields(user: dict, fields: dict, today) -> None:
    if user.get("initial_fbs") is None and user.get("initial_ppbs") is None:
        if fields.get("current_fbs") is not None or fields.get("current_ppbs") is not None:
            fields["initial_fbs"] = fields.get("current_fbs", user.get("current_fbs"))
            fields["initial_ppbs"] = fields.get("current_ppbs", user.get("current_ppbs"))
            fields["initial_recorded_on"] = today


def update_profile(store, user_id, fields: dict, clock) -> dict:
    cleaned = validate_profile_fields(fields)
    user = require_user(store, user_id)
    today = clock.today()

    _apply_reading_fields(user, cleaned, today)
    merged = {**user, **cleaned}
    cleaned.update(recompute_targets(merged, today))
    cleaned["has_profile"] = not missing_required_fields(merged)

    updated = store.set_document(USERS_COLLECTION, user_id, cleaned, merge=True)
    if "display_name" in cleaned and cleaned["display_name"] != user.get("display_name"):
        sync_leaderboard_entry(store, user_id, name=cleaned["display_name"] or "Anonymous")

    current_app.logger.info("Updated profile for user %s (%s)", user_id, ", ".join(sorted(fields or {})))
    return updated


def record_blood_sugar(store, user_id, fbs, ppbs, clock) -> dict:
    if fbs in (None, "") and ppbs in (None, ""):
        raise InvalidInputError("Provide a fasting or post-meal reading.")
    readings = validate_profile_fields(
        {name: value for name, value in (("current_fbs", fbs), ("current_ppbs", ppbs)) if value not in (None, "")}
    )
    user = require_user(store, user_id)
    today = clock.today()

    _apply_reading_fields(user, readings, today)
    merged = {**user, **readings}
    readings.update(recompute_targets(merged, today))
    readings["target_set_date"] = today

    updated = store.set_document(USERS_COLLECTION, user_id, readings, merge=True)
    targets = compute_progressive_targets(_initial_reading(updated), updated.get("current_fbs"), updated.get("current_ppbs"))
    current_app.logger.info(
        "Recorded blood sugar for user %s: fbs=%s ppbs=%s -> targets %s/%s",
        user_id,
        updated.get("current_fbs"),
        updated.get("current_ppbs"),
        updated.get("target_fbs"),
        updated.get("target_ppbs"),
    )
    return {"user": updated, "targets": targets}


def profile_summary(user: dict) -> dict:
    bmi = calculate_bmi(user.get("height_cm"), user.get("weight_kg"))
    return {
        **user,
        "bmi": bmi,
        "bmi_category": bmi_category(bmi),
        "missing_fields": missing_required_fields(user),
    }
