from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar

from .connection import DatabaseConnection

T = TypeVar("T")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple[Any, Any]]:
    """Yield ``(conn, cursor)``; commit when the block succeeds, roll back otherwise."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetch_one_as(cur, build: Callable[[Mapping[str, Any]], T]) -> Optional[T]:
    row = cur.fetchone()
    return build(row) if row else None


def fetch_all_as(cur, build: Callable[[Mapping[str, Any]], T]) -> list[T]:
    return [build(row) for row in cur.fetchall() or []]
