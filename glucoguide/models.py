from datetime import datetime

from glucoguide import db


class DocumentMixin:
    def to_document(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}


class UserProfile(DocumentMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(128), primary_key=True)
    display_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    height_cm = db.Column(db.Float, nullable=True)
    weight_kg = db.Column(db.Float, nullable=True)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(32), nullable=True)
    activity_level = db.Column(db.String(32), nullable=True)  # sedentary/light/moderate/high

    diabetes_type = db.Column(db.String(32), nullable=True)
    hba1c_level = db.Column(db.Float, nullable=True)
    medication_status = db.Column(db.String(64), nullable=True)

    # mg/dL
    current_fbs = db.Column(db.Float, nullable=True)
    current_ppbs = db.Column(db.Float, nullable=True)
    initial_fbs = db.Column(db.Float, nullable=True)
    initial_ppbs = db.Column(db.Float, nullable=True)
    initial_recorded_on = db.Column(db.Date, nullable=True)
    target_fbs = db.Column(db.Float, nullable=False, default=100.0)
    target_ppbs = db.Column(db.Float, nullable=False, default=140.0)
    target_set_date = db.Column(db.Date, nullable=True)

    daily_calories = db.Column(db.Integer, nullable=False, default=2000)
    target_carbs = db.Column(db.Float, nullable=False, default=250.0)
    target_protein = db.Column(db.Float, nullable=False, default=100.0)
    target_fat = db.Column(db.Float, nullable=False, default=66.7)
    carb_percent = db.Column(db.Float, nullable=False, default=50.0)
    protein_percent = db.Column(db.Float, nullable=False, default=20.0)
    fat_percent = db.Column(db.Float, nullable=False, default=30.0)

    current_points = db.Column(db.Integer, nullable=False, default=0)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    daily_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    meals_logged_today = db.Column(db.Integer, nullable=False, default=0)
    last_meal_date = db.Column(db.Date, nullable=True)

    # Valid only for last_reset_date.
    consumed_calories = db.Column(db.Float, nullable=False, default=0.0)
    consumed_carbs = db.Column(db.Float, nullable=False, default=0.0)
    consumed_protein = db.Column(db.Float, nullable=False, default=0.0)
    consumed_fat = db.Column(db.Float, nullable=False, default=0.0)
    last_reset_date = db.Column(db.Date, nullable=True)

    has_profile = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    food_logs = db.relationship("FoodLogEntry", backref="user", lazy=True)


class FoodLogEntry(DocumentMixin, db.Model):
    __tablename__ = "food_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), db.ForeignKey("users.id"), nullable=False, index=True)
    food_name = db.Column(db.String(255), nullable=False)
    quantity_g = db.Column(db.Float, nullable=False)

    calories = db.Column(db.Float, nullable=False, default=0.0)
    carbs = db.Column(db.Float, nullable=False, default=0.0)
    protein = db.Column(db.Float, nullable=False, default=0.0)
    fat = db.Column(db.Float, nullable=False, default=0.0)
    sugar = db.Column(db.Float, nullable=False, default=0.0)
    fiber = db.Column(db.Float, nullable=False, default=0.0)
    sodium = db.Column(db.Float, nullable=False, default=0.0)

    meal_type = db.Column(db.String(20), nullable=False)
    points_earned = db.Column(db.Integer, nullable=False, default=0)
    log_date = db.Column(db.Date, index=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)


class ReferenceFood(DocumentMixin, db.Model):
    __tablename__ = "reference_foods"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, index=True, nullable=False)

    # per 100g
    calories = db.Column(db.Float, nullable=False, default=0.0)
    carbs = db.Column(db.Float, nullable=False, default=0.0)
    protein = db.Column(db.Float, nullable=False, default=0.0)
    fat = db.Column(db.Float, nullable=False, default=0.0)
    sugar = db.Column(db.Float, nullable=False, default=0.0)
    fiber = db.Column(db.Float, nullable=False, default=0.0)
    sodium = db.Column(db.Float, nullable=False, default=0.0)  # mg

    source = db.Column(db.String(50), nullable=False, default="seed")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class LeaderboardEntry(DocumentMixin, db.Model):
    __tablename__ = "leaderboard"

    id = db.Column(db.String(128), db.ForeignKey("users.id"), primary_key=True)
    name = db.Column(db.String(255), nullable=True)
    total_points = db.Column(db.Integer, nullable=False, default=0, index=True)
    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class ForumThread(DocumentMixin, db.Model):
    __tablename__ = "forum_threads"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), db.ForeignKey("users.id"), nullable=False, index=True)
    author_name = db.Column(db.String(255), nullable=True)
    category = db.Column(db.String(40), nullable=False, index=True)
    title = db.Column(db.String(100), nullable=False)
    content = db.Column(db.Text, nullable=False)
    tags = db.Column(db.JSON, nullable=True)  # ["diet", "exercise"]
    likes = db.Column(db.Integer, nullable=False, default=0)
    replies = db.Column(db.Integer, nullable=False, default=0)
    last_reply_by = db.Column(db.String(255), nullable=True)
    last_reply_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class ForumReply(DocumentMixin, db.Model):
    __tablename__ = "forum_replies"

    id = db.Column(db.Integer, primary_key=True)
    thread_id = db.Column(db.Integer, db.ForeignKey("forum_threads.id"), nullable=False, index=True)
    user_id = db.Column(db.String(128), db.ForeignKey("users.id"), nullable=False, index=True)
    author_name = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=False)
    likes = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)


class ForumLike(DocumentMixin, db.Model):
    __tablename__ = "forum_likes"

    # "<item_type>:<item_id>:<user_id>"
    id = db.Column(db.String(200), primary_key=True)
    user_id = db.Column(db.String(128), db.ForeignKey("users.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    item_type = db.Column(db.String(16), nullable=False)  # thread | reply
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
