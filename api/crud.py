# api/crud.py

from typing import Optional

from sqlalchemy import select, insert, update, delete
from sqlalchemy.engine import Connection, Engine
from . import database

# We use the SQLAlchemy table object defined in database.py


def get_goal_value(conn: Connection, key: str) -> Optional[str]:
    """Fetches the serialized goal stored under a key, if any."""
    query = select(database.goal_records.c.value).where(database.goal_records.c.key == key)
    return conn.execute(query).scalar_one_or_none()


def upsert_goal_value(conn: Connection, key: str, value: str):
    """Replaces the serialized goal stored under a key."""
    exists = get_goal_value(conn, key) is not None
    if exists:
        stmt = (
            update(database.goal_records)
            .where(database.goal_records.c.key == key)
            .values(value=value)
        )
    else:
        stmt = insert(database.goal_records).values(key=key, value=value)
    conn.execute(stmt)


def delete_goal_value(conn: Connection, key: str):
    """Deletes the goal stored under a key. Missing keys are ignored."""
    stmt = delete(database.goal_records).where(database.goal_records.c.key == key)
    conn.execute(stmt)


class SqlGoalStore:
    """GoalStore backed by the goal_records table.

    Each call runs in its own transaction, so calls are safe from worker
    threads.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, key: str) -> Optional[str]:
        with self.engine.connect() as conn:
            return get_goal_value(conn, key)

    def set(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            upsert_goal_value(conn, key, value)

    def delete(self, key: str) -> None:
        with self.engine.begin() as conn:
            delete_goal_value(conn, key)
