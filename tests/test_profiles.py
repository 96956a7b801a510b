import unittest
from datetime import date

from glucoguide.errors import InvalidInputError, UserNotFoundError
from glucoguide.profiles import (
    create_user_profile,
    profile_summary,
    record_blood_sugar,
    update_profile,
    validate_profile_fields,
)
from tests.helpers import START_DAY, AppTestCase

COMPLETE_PROFILE = {
    "height_cm": 170,
    "weight_kg": 70,
    "age": 40,
    "gender": "Male",
    "activity_level": "moderate",
}


class ProfileValidationTestCase(unittest.TestCase):
    def test_values_are_coerced(self):
        cleaned = validate_profile_fields({"age": "41", "height_cm": "172.5", "gender": " Female ", "email": ""})

        self.assertEqual(cleaned, {"age": 41, "height_cm": 172.5, "gender": "female", "email": None})

    def test_out_of_range_values_rejected(self):
        for fields in ({"age": 0}, {"height_cm": 20}, {"weight_kg": 900}, {"hba1c_level": 22}, {"current_fbs": 40}):
            with self.assertRaises(InvalidInputError):
                validate_profile_fields(fields)

    def test_non_finite_values_rejected(self):
        for value in ("nan", "inf", "-inf", float("nan"), float("inf")):
            for name in ("height_cm", "weight_kg", "hba1c_level", "current_fbs", "age"):
                with self.subTest(name=name, value=value):
                    with self.assertRaises(InvalidInputError):
                        validate_profile_fields({name: value})

    def test_bad_choices_and_unknown_fields_rejected(self):
        with self.assertRaises(InvalidInputError):
            validate_profile_fields({"gender": "robot"})
        with self.assertRaises(InvalidInputError):
            validate_profile_fields({"activity_level": "extreme"})
        with self.assertRaises(InvalidInputError):
            validate_profile_fields({"total_points": 1000})
        with self.assertRaises(InvalidInputError):
            validate_profile_fields({"weight_kg": "heavy"})


class ProfileServiceTestCase(AppTestCase):
    def test_create_is_idempotent(self):
        first = create_user_profile(self.store, "u1", display_name="Asha")
        second = create_user_profile(self.store, "u1", display_name="Someone else")

        self.assertEqual(first["id"], "u1")
        self.assertEqual(second["display_name"], "Asha")
        self.assertFalse(second["has_profile"])
        self.assertEqual(second["daily_calories"], 2000)
        self.assertEqual(self.store.get_document("leaderboard", "u1")["name"], "Asha")

    def test_create_requires_id(self):
        with self.assertRaises(InvalidInputError):
            create_user_profile(self.store, "")

    def test_complete_profile_sets_calorie_and_macro_targets(self):
        self.make_user()

        user = update_profile(self.store, "u1", COMPLETE_PROFILE, self.clock)

        self.assertTrue(user["has_profile"])
        self.assertEqual(user["daily_calories"], 2464)
        self.assertEqual(user["target_carbs"], 308.0)
        self.assertEqual(user["target_protein"], 123.2)
        self.assertEqual(user["target_fat"], 82.1)
        self.assertEqual(user["target_fbs"], 100)
        self.assertEqual(user["target_set_date"], START_DAY)

    def test_partial_profile_keeps_default_calories(self):
        self.make_user()

        user = update_profile(self.store, "u1", {"age": 40}, self.clock)

        self.assertFalse(user["has_profile"])
        self.assertEqual(user["daily_calories"], 2000)
        self.assertEqual(profile_summary(user)["missing_fields"], ["height_cm", "weight_kg", "gender", "activity_level"])

    def test_nan_height_rejected_before_any_write(self):
        self.make_user()

        with self.assertRaises(InvalidInputError):
            update_profile(self.store, "u1", {**COMPLETE_PROFILE, "height_cm": "nan"}, self.clock)
        with self.assertRaises(InvalidInputError):
            record_blood_sugar(self.store, "u1", "inf", None, self.clock)

        user = self.store.get_document("users", "u1")
        self.assertIsNone(user["height_cm"])
        self.assertIsNone(user["current_fbs"])
        self.assertFalse(user["has_profile"])

    def test_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            update_profile(self.store, "ghost", {"age": 40}, self.clock)

    def test_display_name_change_reaches_leaderboard(self):
        self.make_user()

        update_profile(self.store, "u1", {"display_name": "Asha K"}, self.clock)

        self.assertEqual(self.store.get_document("leaderboard", "u1")["name"], "Asha K")

    def test_first_reading_becomes_initial(self):
        self.make_user()

        result = record_blood_sugar(self.store, "u1", 180, 260, self.clock)

        user = result["user"]
        self.assertEqual(user["initial_fbs"], 180)
        self.assertEqual(user["initial_ppbs"], 260)
        self.assertEqual(user["initial_recorded_on"], START_DAY)
        self.assertEqual(user["target_fbs"], 162)
        self.assertEqual(user["target_ppbs"], 234)
        self.assertEqual(result["targets"]["reduction_percent"], 10)

    def test_later_readings_move_targets_but_not_initial(self):
        self.make_user()
        record_blood_sugar(self.store, "u1", 180, 260, self.clock)
        self.clock.advance()

        result = record_blood_sugar(self.store, "u1", 150, None, self.clock)

        user = result["user"]
        self.assertEqual(user["initial_fbs"], 180)
        self.assertEqual(user["current_fbs"], 150)
        self.assertEqual(user["current_ppbs"], 260)
        self.assertEqual(user["target_fbs"], 135)
        self.assertEqual(user["target_ppbs"], 234)
        self.assertEqual(user["target_set_date"], date(2026, 3, 11))

    def test_high_reading_lowers_calories_for_complete_profile(self):
        self.make_user()
        update_profile(self.store, "u1", COMPLETE_PROFILE, self.clock)

        user = record_blood_sugar(self.store, "u1", 200, None, self.clock)["user"]

        self.assertEqual(user["daily_calories"], 2094)
        self.assertLess(user["carb_percent"], 50.0)

    def test_reading_required(self):
        self.make_user()
        with self.assertRaises(InvalidInputError):
            record_blood_sugar(self.store, "u1", None, "", self.clock)
        with self.assertRaises(InvalidInputError):
            record_blood_sugar(self.store, "u1", 650, None, self.clock)

    def test_summary_includes_bmi(self):
        self.make_user()
        user = update_profile(self.store, "u1", COMPLETE_PROFILE, self.clock)

        summary = profile_summary(user)
        self.assertEqual(summary["bmi"], 24.2)
        self.assertEqual(summary["bmi_category"], "Normal weight")
        self.assertEqual(summary["missing_fields"], [])


if __name__ == "__main__":
    unittest.main()
