"""Calorie, blood-sugar and macro target calculations.

Everything here is pure: the profile service feeds in the stored biometrics
and readings and persists whatever comes back.
"""

import math

from glucoguide.errors import InvalidInputError

ACTIVITY_FACTORS = {
    "sedentary": 1.0,
    "light": 1.2,
    "moderate": 1.55,
    "high": 1.725,
}

IDEAL_FBS = 100
IDEAL_PPBS = 140
TARGET_REDUCTION = 0.10

KCAL_PER_GRAM = {"carbs": 4, "protein": 4, "fat": 9}
BASELINE_SPLIT = {"carbs": 50.0, "protein": 20.0, "fat": 30.0}
MIN_CARB_PERCENT = 30.0
MAX_CARB_PERCENT = 60.0


def ideal_body_weight(height_cm: float) -> float:
    if height_cm is None or not math.isfinite(height_cm) or height_cm <= 0:
        raise InvalidInputError("Height must be a positive number of centimeters.")
    height_m = height_cm / 100
    return 22 * height_m * height_m


def severity_factor(current_fbs: float | None, current_ppbs: float | None) -> float:
    fbs = current_fbs or 0
    ppbs = current_ppbs or 0
    if fbs >= 180 or ppbs >= 250:
        return 0.85
    if fbs >= 126 or ppbs >= 180:
        return 0.9
    return 1.0


def estimate_daily_calories(height_cm, weight_kg, age, gender, activity_level, current_fbs, current_ppbs) -> dict:
    activity_factor = ACTIVITY_FACTORS.get((activity_level or "").strip().lower())
    if activity_factor is None:
        raise InvalidInputError(f"Unknown activity level: {activity_level!r}")

    ibw = ideal_body_weight(height_cm)
    severity = severity_factor(current_fbs, current_ppbs)
    return {
        "daily_calories": int(round(ibw * 25 * activity_factor * severity)),
        "ideal_body_weight": round(ibw, 1),
        "severity_factor": severity,
        "activity_factor": activity_factor,
    }


def compute_progressive_targets(initial_reading: dict | None, current_fbs, current_ppbs) -> dict:
    """Next blood-sugar goals: 10% below the latest reading, never below the clinical ideal.

    Targets re-anchor to the current reading on every call, so they tighten as
    readings improve. Without an initial reading the ideal values are used.
    """
    if not initial_reading:
        return {
            "target_fbs": IDEAL_FBS,
            "target_ppbs": IDEAL_PPBS,
            "reduction_percent": 0,
            "fbs_reduction": 0,
            "ppbs_reduction": 0,
            "is_at_ideal_level": (
                current_fbs is not None
                and current_ppbs is not None
                and current_fbs <= IDEAL_FBS
                and current_ppbs <= IDEAL_PPBS
            ),
        }

    fbs = current_fbs if current_fbs is not None else initial_reading.get("fbs")
    ppbs = current_ppbs if current_ppbs is not None else initial_reading.get("ppbs")
    fbs = fbs if fbs is not None else IDEAL_FBS
    ppbs = ppbs if ppbs is not None else IDEAL_PPBS

    target_fbs = max(IDEAL_FBS, int(round(fbs * (1 - TARGET_REDUCTION))))
    target_ppbs = max(IDEAL_PPBS, int(round(ppbs * (1 - TARGET_REDUCTION))))
    return {
        "target_fbs": target_fbs,
        "target_ppbs": target_ppbs,
        "reduction_percent": int(TARGET_REDUCTION * 100),
        "fbs_reduction": max(0, round(fbs - target_fbs, 1)),
        "ppbs_reduction": max(0, round(ppbs - target_ppbs, 1)),
        "is_at_ideal_level": fbs <= IDEAL_FBS and ppbs <= IDEAL_PPBS,
    }


def allocate_macros(daily_calories, current_fbs, current_ppbs, target_fbs, target_ppbs) -> dict:
    if daily_calories is None or daily_calories <= 0:
        raise InvalidInputError("Daily calories must be positive.")

    fbs_gap = (current_fbs or 0) - (target_fbs if target_fbs is not None else IDEAL_FBS)
    ppbs_gap = (current_ppbs or 0) - (target_ppbs if target_ppbs is not None else IDEAL_PPBS)
    fbs_deviation = max(0, fbs_gap / 10)
    ppbs_deviation = max(0, ppbs_gap / 10)

    carb_percent = BASELINE_SPLIT["carbs"] - 0.1 * fbs_deviation - 0.1 * ppbs_deviation
    carb_percent = min(MAX_CARB_PERCENT, max(MIN_CARB_PERCENT, carb_percent))

    # Carb share given up is split between protein and fat in the baseline 20:30 ratio.
    lost = BASELINE_SPLIT["carbs"] - carb_percent
    protein_percent = BASELINE_SPLIT["protein"] + lost * BASELINE_SPLIT["protein"] / BASELINE_SPLIT["carbs"]
    fat_percent = BASELINE_SPLIT["fat"] + lost * BASELINE_SPLIT["fat"] / BASELINE_SPLIT["carbs"]

    return {
        "target_carbs": round(daily_calories * carb_percent / 100 / KCAL_PER_GRAM["carbs"], 1),
        "target_protein": round(daily_calories * protein_percent / 100 / KCAL_PER_GRAM["protein"], 1),
        "target_fat": round(daily_calories * fat_percent / 100 / KCAL_PER_GRAM["fat"], 1),
        "carb_percent": round(carb_percent, 1),
        "protein_percent": round(protein_percent, 1),
        # Rounded shares total 100.
        "fat_percent": round(100 - round(carb_percent, 1) - round(protein_percent, 1), 1),
    }


def calculate_bmi(height_cm, weight_kg) -> float | None:
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float | None) -> str | None:
    if bmi is None:
        return None
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"
