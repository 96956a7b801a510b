"""create glucoguide tables

Revision ID: 2c7e41a9d0b3
Revises:
Create Date: 2026-03-02 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "2c7e41a9d0b3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("height_cm", sa.Float(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(length=32), nullable=True),
        sa.Column("activity_level", sa.String(length=32), nullable=True),
        sa.Column("diabetes_type", sa.String(length=32), nullable=True),
        sa.Column("hba1c_level", sa.Float(), nullable=True),
        sa.Column("medication_status", sa.String(length=64), nullable=True),
        sa.Column("current_fbs", sa.Float(), nullable=True),
        sa.Column("current_ppbs", sa.Float(), nullable=True),
        sa.Column("initial_fbs", sa.Float(), nullable=True),
        sa.Column("initial_ppbs", sa.Float(), nullable=True),
        sa.Column("initial_recorded_on", sa.Date(), nullable=True),
        sa.Column("target_fbs", sa.Float(), nullable=False, server_default="100"),
        sa.Column("target_ppbs", sa.Float(), nullable=False, server_default="140"),
        sa.Column("target_set_date", sa.Date(), nullable=True),
        sa.Column("daily_calories", sa.Integer(), nullable=False, server_default="2000"),
        sa.Column("target_carbs", sa.Float(), nullable=False, server_default="250"),
        sa.Column("target_protein", sa.Float(), nullable=False, server_default="100"),
        sa.Column("target_fat", sa.Float(), nullable=False, server_default="66.7"),
        sa.Column("carb_percent", sa.Float(), nullable=False, server_default="50"),
        sa.Column("protein_percent", sa.Float(), nullable=False, server_default="20"),
        sa.Column("fat_percent", sa.Float(), nullable=False, server_default="30"),
        sa.Column("current_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("meals_logged_today", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_meal_date", sa.Date(), nullable=True),
        sa.Column("consumed_calories", sa.Float(), nullable=False, server_default="0"),
        sa.Column("consumed_carbs", sa.Float(), nullable=False, server_default="0"),
        sa.Column("consumed_protein", sa.Float(), nullable=False, server_default="0"),
        sa.Column("consumed_fat", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_reset_date", sa.Date(), nullable=True),
        sa.Column("has_profile", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "reference_foods",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("calories", sa.Float(), nullable=False),
        sa.Column("carbs", sa.Float(), nullable=False),
        sa.Column("protein", sa.Float(), nullable=False),
        sa.Column("fat", sa.Float(), nullable=False),
        sa.Column("sugar", sa.Float(), nullable=False),
        sa.Column("fiber", sa.Float(), nullable=False),
        sa.Column("sodium", sa.Float(), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("reference_foods", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_reference_foods_name"), ["name"], unique=True)

    op.create_table(
        "food_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("food_name", sa.String(length=255), nullable=False),
        sa.Column("quantity_g", sa.Float(), nullable=False),
        sa.Column("calories", sa.Float(), nullable=False),
        sa.Column("carbs", sa.Float(), nullable=False),
        sa.Column("protein", sa.Float(), nullable=False),
        sa.Column("fat", sa.Float(), nullable=False),
        sa.Column("sugar", sa.Float(), nullable=False),
        sa.Column("fiber", sa.Float(), nullable=False),
        sa.Column("sodium", sa.Float(), nullable=False),
        sa.Column("meal_type", sa.String(length=20), nullable=False),
        sa.Column("points_earned", sa.Integer(), nullable=False),
        sa.Column("log_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("food_logs", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_food_logs_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_food_logs_log_date"), ["log_date"], unique=False)
        batch_op.create_index(batch_op.f("ix_food_logs_created_at"), ["created_at"], unique=False)

    op.create_table(
        "leaderboard",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("longest_streak", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("leaderboard", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_leaderboard_total_points"), ["total_points"], unique=False)

    op.create_table(
        "forum_threads",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("replies", sa.Integer(), nullable=False),
        sa.Column("last_reply_by", sa.String(length=255), nullable=True),
        sa.Column("last_reply_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("forum_threads", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_forum_threads_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_forum_threads_category"), ["category"], unique=False)
        batch_op.create_index(batch_op.f("ix_forum_threads_created_at"), ["created_at"], unique=False)

    op.create_table(
        "forum_replies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["forum_threads.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("forum_replies", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_forum_replies_thread_id"), ["thread_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_forum_replies_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_forum_replies_created_at"), ["created_at"], unique=False)

    op.create_table(
        "forum_likes",
        sa.Column("id", sa.String(length=200), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("forum_likes", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_forum_likes_user_id"), ["user_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_forum_likes_item_id"), ["item_id"], unique=False)


def downgrade():
    with op.batch_alter_table("forum_likes", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_forum_likes_item_id"))
        batch_op.drop_index(batch_op.f("ix_forum_likes_user_id"))
    op.drop_table("forum_likes")

    with op.batch_alter_table("forum_replies", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_forum_replies_created_at"))
        batch_op.drop_index(batch_op.f("ix_forum_replies_user_id"))
        batch_op.drop_index(batch_op.f("ix_forum_replies_thread_id"))
    op.drop_table("forum_replies")

    with op.batch_alter_table("forum_threads", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_forum_threads_created_at"))
        batch_op.drop_index(batch_op.f("ix_forum_threads_category"))
        batch_op.drop_index(batch_op.f("ix_forum_threads_user_id"))
    op.drop_table("forum_threads")

    with op.batch_alter_table("leaderboard", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_leaderboard_total_points"))
    op.drop_table("leaderboard")

    with op.batch_alter_table("food_logs", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_food_logs_created_at"))
        batch_op.drop_index(batch_op.f("ix_food_logs_log_date"))
        batch_op.drop_index(batch_op.f("ix_food_logs_user_id"))
    op.drop_table("food_logs")

    with op.batch_alter_table("reference_foods", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_reference_foods_name"))
    op.drop_table("reference_foods")

    op.drop_table("users")
