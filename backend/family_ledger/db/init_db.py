from __future__ import annotations

import logging

from sqlalchemy import func, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from family_ledger.models.category import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Groceries", "description": "Food and household items", "color": "#27ae60", "icon": "🛒"},
    {"name": "Utilities", "description": "Water, electricity, gas, internet", "color": "#3498db", "icon": "💡"},
    {"name": "Transportation", "description": "Gas, public transport, car maintenance", "color": "#e74c3c", "icon": "🚗"},
    {"name": "Entertainment", "description": "Movies, games, hobbies", "color": "#9b59b6", "icon": "🎬"},
    {"name": "Healthcare", "description": "Medical expenses, pharmacy", "color": "#e67e22", "icon": "🏥"},
    {"name": "Education", "description": "Books, courses, tuition", "color": "#1abc9c", "icon": "📚"},
    {"name": "Shopping", "description": "Clothing, electronics, misc", "color": "#f39c12", "icon": "🛍️"},
    {"name": "Dining", "description": "Restaurants, takeout, coffee", "color": "#d35400", "icon": "🍽️"},
    {"name": "Housing", "description": "Rent, mortgage, repairs", "color": "#34495e", "icon": "🏠"},
    {"name": "Other", "description": "Miscellaneous expenses", "color": "#95a5a6", "icon": "📌"},
]

# (table, column) pairs added by the latest migrations.
REQUIRED_COLUMNS = [
    ("users", "refresh_token"),
    ("transactions", "kind"),
]


def check_connection(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def check_schema(engine: Engine) -> None:
    # Fail fast if database schema is behind code; schema changes only happen via alembic.
    inspector = inspect(engine)
    for table, column in REQUIRED_COLUMNS:
        if not inspector.has_table(table):
            raise RuntimeError(f"Database schema is missing table {table}. Run: alembic upgrade head")
        cols = {c.get("name") for c in inspector.get_columns(table)}
        if column not in cols:
            raise RuntimeError(
                f"Database schema is outdated (missing column {table}.{column}). "
                "Run: alembic upgrade head"
            )


def ensure_seed_data(db: Session) -> int:
    """Insert the default categories into an empty registry; returns rows added."""

    existing = db.scalar(select(func.count(Category.id))) or 0
    if existing:
        logger.debug("Found %s existing categories, skipping seed", existing)
        return 0

    db.add_all([Category(is_active=True, **item) for item in DEFAULT_CATEGORIES])
    db.commit()
    logger.info("Seeded %s default categories", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)
