"""Key-value click counters."""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text, select
from sqlalchemy.engine import Engine
from sqlalchemy.sql import text

metadata = MetaData()

clicks = Table(
    "clicks",
    metadata,
    Column("click_key", Text, primary_key=True),
    Column("hits", Integer, nullable=False, default=0),
)


def counter_key(day: str, slug: str, product_path: str) -> str:
    return f"{day}:{slug}:{product_path}"


def create_tables(engine: Engine) -> None:
    metadata.create_all(engine)


def increment(engine: Engine, key: str) -> int:
    with engine.begin() as conn:
        result = conn.execute(
            text(
                """
                INSERT INTO clicks (click_key, hits) VALUES (:key, 1)
                ON CONFLICT (click_key) DO UPDATE SET hits = clicks.hits + 1
                RETURNING hits
                """
            ),
            {"key": key},
        )
        return int(result.scalar_one())


def get_count(engine: Engine, key: str) -> int:
    with engine.connect() as conn:
        value = conn.execute(select(clicks.c.hits).where(clicks.c.click_key == key)).scalar_one_or_none()
    return int(value or 0)
