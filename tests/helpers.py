import tempfile
import unittest
from datetime import date
from pathlib import Path
from uuid import uuid4

from glucoguide import create_app, db
from glucoguide.clock import CLOCK_EXTENSION_KEY, FixedClock
from glucoguide.models import ReferenceFood
from glucoguide.profiles import create_user_profile
from glucoguide.store import SqlDocumentStore

START_DAY = date(2026, 3, 10)

SAMPLE_FOODS = [
    {"name": "Rice", "calories": 130, "carbs": 28, "protein": 2.7, "fat": 0.3, "sugar": 0.1, "fiber": 0.4, "sodium": 1},
    {"name": "Whole wheat flatbread (Roti/Chapati)", "calories": 202, "carbs": 39.6, "protein": 6.8, "fat": 1.4, "sugar": 0.6, "fiber": 6.5, "sodium": 3.9},
    {"name": "Chickpea curry (Chole)", "calories": 162.4, "carbs": 19.7, "protein": 6.8, "fat": 6.3, "sugar": 2.7, "fiber": 6.4, "sodium": 330},
    {"name": "Sweet rice pudding (Kheer)", "calories": 141, "carbs": 21.8, "protein": 3.6, "fat": 4.5, "sugar": 14.9, "fiber": 0.2, "sodium": 48},
]


class AppTestCase(unittest.TestCase):
    """Fresh schema per test on a throwaway sqlite file, with the clock pinned to START_DAY."""

    @classmethod
    def setUpClass(cls):
        cls.db_file = Path(tempfile.gettempdir()) / f"glucoguide-test-{uuid4().hex}.db"
        cls.app = create_app(
            {
                "TESTING": True,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{cls.db_file.as_posix()}",
                "SEED_REFERENCE_FOODS": False,
                "LOG_LEVEL": "WARNING",
            }
        )

    @classmethod
    def tearDownClass(cls):
        with cls.app.app_context():
            db.drop_all()
            db.engine.dispose()
        if cls.db_file.exists():
            cls.db_file.unlink()

    def setUp(self):
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.drop_all()
        db.create_all()

        self.store = SqlDocumentStore()
        self.clock = FixedClock(START_DAY)
        self.app.extensions[CLOCK_EXTENSION_KEY] = self.clock

    def tearDown(self):
        db.session.remove()
        self.app.extensions.pop(CLOCK_EXTENSION_KEY, None)
        self.ctx.pop()

    def add_foods(self, rows=None):
        for row in rows or SAMPLE_FOODS:
            db.session.add(ReferenceFood(source="test", **row))
        db.session.commit()

    def make_user(self, user_id="u1", display_name="Asha"):
        return create_user_profile(self.store, user_id, display_name=display_name)
