"""SQLite task store adapter."""

import contextlib
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Sequence

from taskday.core.predicates import Clause, InstantRange, TaskPredicate
from taskday.core.query import CANONICAL_ORDER
from taskday.core.tasks import Priority, Task, TaskStatus

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)

# Mirrors core.tasks.sort_key so a paged query returns the same slice the
# engine would cut from a fully sorted list.
_ORDER_BY = """
    CASE status WHEN 'active' THEN 0 WHEN 'completed' THEN 1 ELSE 2 END,
    CASE priority WHEN 'urgent' THEN 4 WHEN 'high' THEN 3 WHEN 'medium' THEN 2 ELSE 1 END DESC,
    due_at IS NULL,
    due_at,
    created_at DESC,
    id
"""


def _to_micros(instant: datetime | None) -> int | None:
    """Epoch microseconds, exact for any aware datetime."""
    if instant is None:
        return None
    return (instant - _EPOCH) // _MICROSECOND


def _from_micros(value: int | None) -> datetime | None:
    if value is None:
        return None
    return _EPOCH + timedelta(microseconds=value)


def _casefold_contains(title: str | None, needle: str | None) -> int:
    if title is None or needle is None:
        return 0
    return int(needle.casefold() in title.casefold())


def _range_sql(column: str, rng: InstantRange) -> tuple[list[str], list]:
    parts = [f"{column} IS NOT NULL"]
    params: list = []
    if rng.start is not None:
        parts.append(f"{column} >= ?")
        params.append(_to_micros(rng.start))
    if rng.end is not None:
        parts.append(f"{column} < ?")
        params.append(_to_micros(rng.end))
    return parts, params


def _clause_sql(clause: Clause) -> tuple[str, list]:
    statuses = sorted(s.value for s in clause.statuses)
    parts = [f"status IN ({', '.join('?' for _ in statuses)})"]
    params: list = list(statuses)
    if clause.due_is_null:
        parts.append("due_at IS NULL")
    if clause.due is not None:
        due_parts, due_params = _range_sql("due_at", clause.due)
        parts += due_parts
        params += due_params
    if clause.completed is not None:
        done_parts, done_params = _range_sql("completed_at", clause.completed)
        parts += done_parts
        params += done_params
    return "(" + " AND ".join(parts) + ")", params


def predicate_to_sql(tenant_id: str, user_id: str, predicate: TaskPredicate) -> tuple[str, list]:
    """Translate a predicate into a parameterised WHERE clause."""
    where = ["tenant_id = ?", "user_id = ?"]
    params: list = [tenant_id, user_id]

    if predicate.priority is not None:
        where.append("priority = ?")
        params.append(predicate.priority.value)
    if predicate.search:
        where.append("casefold_contains(title, ?)")
        params.append(predicate.search)

    if predicate.clauses:
        branches = []
        for clause in predicate.clauses:
            sql, clause_params = _clause_sql(clause)
            branches.append(sql)
            params += clause_params
        where.append("(" + " OR ".join(branches) + ")")
    else:
        where.append("0")

    return " AND ".join(where), params


class SqliteTaskStore:
    """
    SQLite task store.

    Implements TaskStore protocol. Instants are stored as integer epoch
    microseconds so range comparisons in SQL agree exactly with the
    in-memory predicate evaluation.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3"):
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info(f"SqliteTaskStore ready db={self._db_path}")

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold_contains", 2, _casefold_contains, deterministic=True)
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    tenant_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'active',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    due_at INTEGER,
                    completed_at INTEGER,
                    created_at INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_owner_status_due "
                "ON tasks(tenant_id, user_id, status, due_at)"
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            title=row["title"],
            status=TaskStatus(row["status"]),
            priority=Priority(row["priority"]),
            due_at=_from_micros(row["due_at"]),
            completed_at=_from_micros(row["completed_at"]),
            created_at=_from_micros(row["created_at"]),
        )

    # ---- writes ----

    def add(self, task: Task) -> None:
        """Insert or replace a task by id."""
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO tasks(
                    id, tenant_id, user_id, title, status, priority,
                    due_at, completed_at, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.tenant_id,
                    task.user_id,
                    task.title,
                    task.status.value,
                    task.priority.value,
                    _to_micros(task.due_at),
                    _to_micros(task.completed_at),
                    _to_micros(task.created_at),
                ),
            )
            conn.commit()
            logger.debug(f"Task stored id={task.id} status={task.status.value} due_at={task.due_at}")
        finally:
            conn.close()

    def get(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    # ---- queries ----

    def find_tasks(
        self,
        tenant_id: str,
        user_id: str,
        predicate: TaskPredicate,
        order: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Task]:
        """Fetch tasks matching a predicate, optionally ordered and paged."""
        where, params = predicate_to_sql(tenant_id, user_id, predicate)
        sql = f"SELECT * FROM tasks WHERE {where}"
        if order is not None:
            if tuple(order) != CANONICAL_ORDER:
                raise ValueError(f"Unsupported order hint: {order!r}")
            sql += f" ORDER BY {_ORDER_BY}"
        if limit is not None or offset:
            sql += " LIMIT ? OFFSET ?"
            params += [-1 if limit is None else limit, offset]

        conn = self._get_conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        logger.debug(f"find_tasks {predicate.description or 'predicate'} -> {len(rows)} rows")
        return [self._row_to_task(row) for row in rows]

    def count_tasks(self, tenant_id: str, user_id: str, predicate: TaskPredicate) -> int:
        """Count tasks matching a predicate."""
        where, params = predicate_to_sql(tenant_id, user_id, predicate)
        conn = self._get_conn()
        try:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM tasks WHERE {where}", params).fetchone()
            return int(n)
        finally:
            conn.close()
