import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable

import httpx
from flask import current_app

from glucoguide import db
from glucoguide.models import ReferenceFood

logger = logging.getLogger(__name__)

_SEEDED_DATABASES: set[str] = set()

NUTRIENT_FIELDS = ("calories", "carbs", "protein", "fat", "sugar", "fiber", "sodium")

# Values per 100g. Alternate (Hindi) names go in parentheses, "/" separated.
REFERENCE_FOODS = [
    {"name": "Hot tea (Garam Chai)", "calories": 16.1, "carbs": 2.6, "protein": 0.4, "fat": 0.5, "sugar": 2.6, "fiber": 0, "sodium": 3.1},
    {"name": "Instant coffee", "calories": 23.2, "carbs": 3.7, "protein": 0.6, "fat": 0.8, "sugar": 3.4, "fiber": 0, "sodium": 4.9},
    {"name": "Boiled rice (Uble chawal)", "calories": 117.1, "carbs": 25.9, "protein": 2.2, "fat": 0.2, "sugar": 0.1, "fiber": 0.4, "sodium": 1.4},
    {"name": "Brown rice, cooked", "calories": 112.0, "carbs": 23.0, "protein": 2.6, "fat": 0.8, "sugar": 0.4, "fiber": 1.8, "sodium": 5.0},
    {"name": "Vegetable pulao", "calories": 145.6, "carbs": 22.8, "protein": 3.1, "fat": 4.8, "sugar": 1.2, "fiber": 1.9, "sodium": 212.0},
    {"name": "Whole wheat flatbread (Roti/Chapati/Phulka)", "calories": 202.0, "carbs": 39.6, "protein": 6.8, "fat": 1.4, "sugar": 0.6, "fiber": 6.5, "sodium": 3.9},
    {"name": "Plain paratha", "calories": 331.5, "carbs": 40.7, "protein": 7.0, "fat": 15.7, "sugar": 0.8, "fiber": 6.0, "sodium": 5.5},
    {"name": "Stuffed potato paratha (Aloo paratha)", "calories": 262.0, "carbs": 33.4, "protein": 5.3, "fat": 11.9, "sugar": 1.1, "fiber": 4.2, "sodium": 234.0},
    {"name": "Missi roti", "calories": 229.5, "carbs": 33.1, "protein": 9.4, "fat": 6.9, "sugar": 1.0, "fiber": 7.3, "sodium": 180.0},
    {"name": "Yellow lentil curry (Dal/Arhar dal)", "calories": 104.3, "carbs": 13.5, "protein": 5.8, "fat": 3.0, "sugar": 0.9, "fiber": 2.9, "sodium": 290.0},
    {"name": "Black lentil curry (Dal makhani)", "calories": 143.6, "carbs": 12.9, "protein": 5.5, "fat": 7.9, "sugar": 1.3, "fiber": 3.4, "sodium": 310.0},
    {"name": "Chickpea curry (Chole/Chana masala)", "calories": 162.4, "carbs": 19.7, "protein": 6.8, "fat": 6.3, "sugar": 2.7, "fiber": 6.4, "sodium": 330.0},
    {"name": "Kidney bean curry (Rajma)", "calories": 140.0, "carbs": 17.5, "protein": 6.9, "fat": 4.7, "sugar": 1.5, "fiber": 5.8, "sodium": 300.0},
    {"name": "Cottage cheese curry (Paneer butter masala)", "calories": 245.0, "carbs": 8.1, "protein": 9.3, "fat": 19.8, "sugar": 4.2, "fiber": 1.3, "sodium": 420.0},
    {"name": "Spinach with cottage cheese (Palak paneer)", "calories": 158.0, "carbs": 5.6, "protein": 8.1, "fat": 11.6, "sugar": 1.6, "fiber": 2.4, "sodium": 360.0},
    {"name": "Mixed vegetable curry (Sabzi)", "calories": 93.0, "carbs": 9.1, "protein": 2.4, "fat": 5.4, "sugar": 3.0, "fiber": 3.1, "sodium": 280.0},
    {"name": "Okra stir fry (Bhindi masala)", "calories": 112.0, "carbs": 8.4, "protein": 2.3, "fat": 7.9, "sugar": 2.1, "fiber": 4.2, "sodium": 240.0},
    {"name": "Cauliflower potato curry (Aloo gobi)", "calories": 118.0, "carbs": 12.6, "protein": 2.9, "fat": 6.4, "sugar": 2.8, "fiber": 3.3, "sodium": 260.0},
    {"name": "Bottle gourd curry (Lauki)", "calories": 61.0, "carbs": 6.2, "protein": 1.1, "fat": 3.6, "sugar": 2.4, "fiber": 2.2, "sodium": 190.0},
    {"name": "Chicken curry", "calories": 168.0, "carbs": 4.4, "protein": 15.6, "fat": 9.9, "sugar": 1.8, "fiber": 1.0, "sodium": 390.0},
    {"name": "Tandoori chicken", "calories": 150.0, "carbs": 2.4, "protein": 23.5, "fat": 5.2, "sugar": 0.9, "fiber": 0.4, "sodium": 450.0},
    {"name": "Fish curry (Machli)", "calories": 132.0, "carbs": 3.9, "protein": 14.2, "fat": 6.6, "sugar": 1.4, "fiber": 0.8, "sodium": 370.0},
    {"name": "Boiled egg (Anda)", "calories": 155.0, "carbs": 1.1, "protein": 12.6, "fat": 10.6, "sugar": 1.1, "fiber": 0, "sodium": 124.0},
    {"name": "Egg omelette", "calories": 154.0, "carbs": 1.4, "protein": 10.6, "fat": 11.7, "sugar": 0.9, "fiber": 0.2, "sodium": 310.0},
    {"name": "Steamed rice cake (Idli)", "calories": 139.0, "carbs": 28.6, "protein": 4.5, "fat": 0.6, "sugar": 0.3, "fiber": 1.5, "sodium": 260.0},
    {"name": "Rice lentil crepe (Dosa)", "calories": 168.0, "carbs": 27.9, "protein": 3.9, "fat": 4.4, "sugar": 0.4, "fiber": 1.3, "sodium": 290.0},
    {"name": "Lentil vegetable stew (Sambar)", "calories": 65.0, "carbs": 8.9, "protein": 3.0, "fat": 2.1, "sugar": 1.9, "fiber": 2.6, "sodium": 250.0},
    {"name": "Semolina porridge (Upma)", "calories": 160.0, "carbs": 24.1, "protein": 3.8, "fat": 5.4, "sugar": 1.0, "fiber": 2.0, "sodium": 280.0},
    {"name": "Flattened rice (Poha)", "calories": 158.0, "carbs": 27.4, "protein": 3.1, "fat": 4.2, "sugar": 1.1, "fiber": 1.9, "sodium": 240.0},
    {"name": "Sprouted moong salad", "calories": 92.0, "carbs": 13.8, "protein": 6.9, "fat": 0.9, "sugar": 2.5, "fiber": 5.2, "sodium": 90.0},
    {"name": "Plain curd (Dahi)", "calories": 61.0, "carbs": 4.7, "protein": 3.5, "fat": 3.3, "sugar": 4.7, "fiber": 0, "sodium": 46.0},
    {"name": "Cucumber raita", "calories": 55.0, "carbs": 4.5, "protein": 2.8, "fat": 2.8, "sugar": 3.5, "fiber": 0.5, "sodium": 150.0},
    {"name": "Buttermilk (Chaas)", "calories": 40.0, "carbs": 4.8, "protein": 3.3, "fat": 0.9, "sugar": 4.8, "fiber": 0, "sodium": 105.0},
    {"name": "Guava (Amrood)", "calories": 68.0, "carbs": 14.3, "protein": 2.6, "fat": 1.0, "sugar": 8.9, "fiber": 5.4, "sodium": 2.0},
    {"name": "Apple (Seb)", "calories": 52.0, "carbs": 13.8, "protein": 0.3, "fat": 0.2, "sugar": 10.4, "fiber": 2.4, "sodium": 1.0},
    {"name": "Banana (Kela)", "calories": 89.0, "carbs": 22.8, "protein": 1.1, "fat": 0.3, "sugar": 12.2, "fiber": 2.6, "sodium": 1.0},
    {"name": "Roasted chickpeas (Bhuna chana)", "calories": 364.0, "carbs": 58.0, "protein": 18.6, "fat": 5.2, "sugar": 2.1, "fiber": 16.8, "sodium": 24.0},
    {"name": "Almonds (Badam)", "calories": 579.0, "carbs": 21.6, "protein": 21.2, "fat": 49.9, "sugar": 4.4, "fiber": 12.5, "sodium": 1.0},
    {"name": "Vegetable samosa", "calories": 262.0, "carbs": 31.6, "protein": 4.7, "fat": 13.1, "sugar": 2.2, "fiber": 2.8, "sodium": 420.0},
    {"name": "Sweet rice pudding (Kheer)", "calories": 141.0, "carbs": 21.8, "protein": 3.6, "fat": 4.5, "sugar": 14.9, "fiber": 0.2, "sodium": 48.0},
    {"name": "Fried milk dumplings (Gulab jamun)", "calories": 323.0, "carbs": 51.2, "protein": 4.8, "fat": 11.3, "sugar": 39.8, "fiber": 0.4, "sodium": 60.0},
    {"name": "Oats porridge (Daliya)", "calories": 88.0, "carbs": 14.8, "protein": 3.2, "fat": 1.8, "sugar": 0.8, "fiber": 2.6, "sodium": 40.0},
]

# Column headers used by the public Indian food composition dataset.
DATASET_FIELD_ALIASES = {
    "name": ("name", "Dish Name"),
    "calories": ("calories", "Calories (kcal)"),
    "carbs": ("carbs", "Carbohydrates (g)"),
    "protein": ("protein", "Protein (g)"),
    "fat": ("fat", "Fats (g)"),
    "sugar": ("sugar", "Free Sugar (g)"),
    "fiber": ("fiber", "Fibre (g)"),
    "sodium": ("sodium", "Sodium (mg)"),
}

ALTERNATE_NAME_PATTERN = re.compile(r"\(([^)]+)\)")


def _item_name(item) -> str:
    return str(item.get("name") or "").strip().lower()


def matches_alternate_name(item_name: str, query: str) -> bool:
    if "(" not in item_name:
        return False
    found = ALTERNATE_NAME_PATTERN.search(item_name)
    if not found:
        return False
    for alternate in found.group(1).lower().split("/"):
        alternate = alternate.strip()
        if alternate and (query in alternate or alternate in query):
            return True
    return False


class MatchStrategy:
    label = "match"

    def matches(self, query: str, item_name: str) -> bool:
        raise NotImplementedError

    def find(self, query: str, foods: Iterable[dict]):
        for item in foods:
            item_name = _item_name(item)
            if item_name and self.matches(query, item_name):
                return item
        return None


class ExactNameMatch(MatchStrategy):
    label = "exact"

    def matches(self, query, item_name):
        return item_name == query


class PartialNameMatch(MatchStrategy):
    label = "partial"

    def matches(self, query, item_name):
        return query in item_name or item_name in query or matches_alternate_name(item_name, query)


class WordMatch(MatchStrategy):
    label = "fuzzy"

    def matches(self, query, item_name):
        return any(len(word) > 2 and word in item_name for word in query.split())


MATCH_STRATEGIES = (ExactNameMatch(), PartialNameMatch(), WordMatch())


def resolve_food(food_name: str | None, foods: Iterable[dict], strategies=MATCH_STRATEGIES):
    query = (food_name or "").strip().lower()
    if not query:
        return None

    foods = list(foods)
    for strategy in strategies:
        item = strategy.find(query, foods)
        if item is not None:
            logger.debug("Resolved %r to %r (%s match)", food_name, item.get("name"), strategy.label)
            return item

    logger.info("No reference food found for %r", food_name)
    return None


def scale_nutrients(item: dict, grams: float) -> dict[str, float]:
    multiplier = grams / 100
    return {field: round(float(item.get(field) or 0) * multiplier, 2) for field in NUTRIENT_FIELDS}


def compute_nutrition(food_name: str | None, grams: float, foods: Iterable[dict]) -> dict | None:
    item = resolve_food(food_name, foods)
    if item is None:
        return None
    return {"food_name": item.get("name"), "quantity": grams, **scale_nutrients(item, grams)}


def _food_payload(item: dict) -> dict:
    return {"name": item.get("name"), **{field: item.get(field) for field in NUTRIENT_FIELDS}}


def search_foods(query: str | None, foods: Iterable[dict], limit: int = 10) -> list[dict]:
    term = (query or "").strip().lower()
    if len(term) < 2:
        return []
    results = []
    for item in foods:
        item_name = _item_name(item)
        if term in item_name or matches_alternate_name(item_name, term):
            results.append(_food_payload(item))
            if len(results) >= limit:
                break
    return results


def food_suggestions(partial_name: str | None, foods: Iterable[dict], limit: int = 8) -> list[str]:
    term = (partial_name or "").strip().lower()
    if len(term) < 2:
        return []
    names = []
    for item in foods:
        item_name = _item_name(item)
        if item_name.startswith(term) or term in item_name or matches_alternate_name(item_name, term):
            names.append(item.get("name"))
            if len(names) >= limit:
                break
    return names


def diabetic_friendly_foods(foods: Iterable[dict], limit: int = 20) -> list[dict]:
    friendly = [
        item for item in foods if (item.get("sugar") or 0) <= 5 and (item.get("fiber") or 0) >= 2
    ]
    friendly.sort(key=lambda item: item.get("fiber") or 0, reverse=True)
    return [_food_payload(item) for item in friendly[:limit]]


def load_reference_foods(store) -> list[dict]:
    return store.query_equal("reference_foods", order_by="id")


def _parse_float(value) -> float:
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_reference_row(row: dict[str, Any]) -> dict | None:
    if not isinstance(row, dict):
        return None

    parsed: dict[str, Any] = {}
    for field, aliases in DATASET_FIELD_ALIASES.items():
        value = next((row[alias] for alias in aliases if alias in row), None)
        if field == "name":
            name = str(value or "").strip()[:255]
            if not name:
                return None
            parsed["name"] = name
        else:
            parsed[field] = _parse_float(value)
    return parsed


def _upsert_reference_food(row: dict, source: str) -> bool:
    existing = ReferenceFood.query.filter_by(name=row["name"]).first()
    if existing:
        changed = False
        for field in NUTRIENT_FIELDS:
            if getattr(existing, field) != row[field]:
                setattr(existing, field, row[field])
                changed = True
        if changed:
            db.session.add(existing)
        return changed

    db.session.add(ReferenceFood(source=source, **row))
    return True


def seed_reference_foods_if_needed() -> None:
    database_key = str(db.engine.url)
    if database_key in _SEEDED_DATABASES:
        return

    changed = False
    for row in REFERENCE_FOODS:
        # Keep seeded values fresh in case they are tuned in code.
        changed = _upsert_reference_food(row, source="seed") or changed

    if changed:
        db.session.commit()
        logger.info("Synced %s seeded reference foods", len(REFERENCE_FOODS))
    _SEEDED_DATABASES.add(database_key)


def fetch_reference_rows(source: str) -> list:
    if source.startswith(("http://", "https://")):
        timeout = current_app.config.get("REFERENCE_FOODS_TIMEOUT", 8.0)
        try:
            response = httpx.get(source, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Reference food download failed from %s: %s", source, exc)
            return []
        data = response.json()
    else:
        data = json.loads(Path(source).read_text(encoding="utf-8"))

    if isinstance(data, dict):
        data = data.get("foods") or []
    return data if isinstance(data, list) else []


def import_reference_foods(source: str) -> int:
    imported = 0
    for raw_row in fetch_reference_rows(source):
        row = parse_reference_row(raw_row)
        if row is None:
            continue
        if _upsert_reference_food(row, source="import"):
            imported += 1

    db.session.commit()
    logger.info("Imported %s reference foods from %s", imported, source)
    return imported
