# src/worklog/tasks/task_store.py

from __future__ import annotations

import contextlib
import functools
import logging
import sqlite3
import time
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import ParamSpec, TypeVar

from ..core.errors import StorageFailure
from .task_models import (
    DailyLedgerRow,
    DailyUserLedgerRow,
    StatusSwap,
    Task,
    TaskStatus,
    TimeEntry,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def _storage_errors(fn: Callable[P, R]) -> Callable[P, R]:
    """Re-raise any sqlite3 error as StorageFailure (keeps the original as __cause__)."""

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return fn(*args, **kwargs)
        except sqlite3.Error as e:
            raise StorageFailure(f"{fn.__name__} failed: {e}") from e

    return wrapper


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    SQLite store for tasks, the time ledger (time_logs) and user labels.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    - multi-statement writes run under BEGIN IMMEDIATE, so a read-then-write
      on a task row cannot interleave with another writer
    """

    def __init__(self, db_path: str | Path = "worklog.sqlite3", *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StorageFailure:
            total = -1
        logger.info("TaskStore ready db=%s tasks=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _write_txn(self) -> Iterator[sqlite3.Connection]:
        """
        One write transaction on a fresh connection.

        Commits on normal exit, rolls back on any exception.
        """
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except BaseException:
            with contextlib.suppress(sqlite3.Error):
                conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL,
                    is_admin INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'todo'
                        CHECK(status IN ('todo', 'in_progress', 'done')),
                    total_minutes INTEGER NOT NULL DEFAULT 0 CHECK(total_minutes >= 0),
                    user_id TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS time_logs (
                    id TEXT PRIMARY KEY,
                    task_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    minutes INTEGER NOT NULL CHECK(minutes > 0),
                    logged_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): ledgers created before auto-logging existed.
            cur.execute("PRAGMA table_info(time_logs)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE time_logs ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column time_logs.%s", name)

            add_col("is_auto_logged", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks(user_id, status)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_time_logs_task_auto "
                "ON time_logs(task_id, user_id, is_auto_logged)"
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_time_logs_user_day ON time_logs(user_id, logged_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=row["description"],
            status=TaskStatus.from_db(row["status"]),
            total_minutes=int(row["total_minutes"] or 0),
            user_id=str(row["user_id"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> TimeEntry:
        return TimeEntry(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            user_id=str(row["user_id"]),
            minutes=int(row["minutes"]),
            logged_at=float(row["logged_at"]),
            auto=bool(row["is_auto_logged"]),
        )

    # ---- users ----

    @_storage_errors
    def upsert_user(self, user_id: str, username: str, *, is_admin: bool = False) -> None:
        now = time.time()
        with self._write_txn() as conn:
            conn.execute(
                """
                INSERT INTO users(id, username, is_admin, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    username = excluded.username,
                    is_admin = excluded.is_admin
                """,
                (user_id, username, int(bool(is_admin)), now),
            )

    # ---- tasks ----

    @_storage_errors
    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    @_storage_errors
    def add_task(
        self,
        *,
        user_id: str,
        title: str,
        description: str | None = None,
        status: TaskStatus = TaskStatus.TODO,
        total_minutes: int = 0,
        now_ts: float | None = None,
    ) -> Task:
        now = time.time() if now_ts is None else float(now_ts)
        task = Task(
            id=_new_id(),
            title=title,
            description=description,
            status=status,
            total_minutes=int(total_minutes),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        with self._write_txn() as conn:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, description, status, total_minutes,
                    user_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    task.status.value,
                    task.total_minutes,
                    task.user_id,
                    task.created_at,
                    task.updated_at,
                ),
            )
        logger.debug("Task added id=%s user=%s status=%s", task.id, user_id, task.status.value)
        return task

    @_storage_errors
    def get_task(self, task_id: str, user_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND user_id = ?",
                (task_id, user_id),
            ).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    @_storage_errors
    def list_tasks(
        self,
        user_id: str,
        *,
        status: TaskStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Task]:
        sql = "SELECT * FROM tasks WHERE user_id = ?"
        params: list[object] = [user_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(status.value)
        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
        params.extend([int(limit), int(offset)])

        conn = self._get_conn()
        try:
            return [self._row_to_task(r) for r in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    @_storage_errors
    def update_task_fields(
        self,
        task_id: str,
        user_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> bool:
        fields: list[str] = []
        params: list[object] = []

        if title is not None:
            fields.append("title = ?")
            params.append(title)

        if description is not None:
            fields.append("description = ?")
            params.append(description)

        if not fields:
            return False

        fields.append("updated_at = ?")
        params.append(time.time())
        params.extend([task_id, user_id])

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ? AND user_id = ?"

        with self._write_txn() as conn:
            cur = conn.execute(sql, params)
            return cur.rowcount == 1

    @_storage_errors
    def delete_task(self, task_id: str, user_id: str) -> bool:
        # Ledger rows are kept: past time still counts in reports.
        with self._write_txn() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ? AND user_id = ?", (task_id, user_id))
            return cur.rowcount == 1

    @_storage_errors
    def swap_status(
        self,
        task_id: str,
        user_id: str,
        new_status: TaskStatus,
        *,
        now_ts: float | None = None,
    ) -> StatusSwap | None:
        """
        Atomically read the current status/total and write the new status.

        Returns None if no task matches id + owner.
        """
        now = time.time() if now_ts is None else float(now_ts)
        with self._write_txn() as conn:
            row = conn.execute(
                "SELECT status, total_minutes FROM tasks WHERE id = ? AND user_id = ?",
                (task_id, user_id),
            ).fetchone()
            if row is None:
                return None
            conn.execute(
                "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ? AND user_id = ?",
                (new_status.value, now, task_id, user_id),
            )
        return StatusSwap(
            task_id=task_id,
            previous_status=TaskStatus.from_db(row["status"]),
            status=new_status,
            total_minutes=int(row["total_minutes"] or 0),
            updated_at=now,
        )

    # ---- time ledger ----

    @_storage_errors
    def add_manual_entry(
        self,
        task_id: str,
        user_id: str,
        minutes: int,
        *,
        now_ts: float | None = None,
    ) -> TimeEntry | None:
        """
        Insert a manual entry and bump tasks.total_minutes in one transaction.

        Returns None (and writes nothing) if no task matches id + owner.
        """
        now = time.time() if now_ts is None else float(now_ts)
        entry = TimeEntry(
            id=_new_id(),
            task_id=task_id,
            user_id=user_id,
            minutes=int(minutes),
            logged_at=now,
            auto=False,
        )
        with self._write_txn() as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET total_minutes = total_minutes + ?, updated_at = ?
                WHERE id = ? AND user_id = ?
                """,
                (entry.minutes, now, task_id, user_id),
            )
            if cur.rowcount != 1:
                return None
            conn.execute(
                """
                INSERT INTO time_logs(id, task_id, user_id, minutes, logged_at, is_auto_logged)
                VALUES (?, ?, ?, ?, ?, 0)
                """,
                (entry.id, task_id, user_id, entry.minutes, now),
            )
        return entry

    @_storage_errors
    def add_auto_entry(
        self,
        task_id: str,
        user_id: str,
        minutes: int,
        *,
        now_ts: float | None = None,
    ) -> TimeEntry | None:
        """
        Make `minutes` the task's only auto entry, if the task is still done.

        Any surviving auto rows (e.g. from a failed retraction) are replaced,
        so a re-delivered event rewrites the same credit instead of adding one.

        Returns None and writes nothing when the task is no longer "done":
        a later transition already superseded this completion.
        """
        now = time.time() if now_ts is None else float(now_ts)
        entry = TimeEntry(
            id=_new_id(),
            task_id=task_id,
            user_id=user_id,
            minutes=int(minutes),
            logged_at=now,
            auto=True,
        )
        with self._write_txn() as conn:
            row = conn.execute(
                "SELECT status FROM tasks WHERE id = ? AND user_id = ?",
                (task_id, user_id),
            ).fetchone()
            if row is None or TaskStatus.from_db(row["status"]) is not TaskStatus.DONE:
                return None
            conn.execute(
                "DELETE FROM time_logs WHERE task_id = ? AND user_id = ? AND is_auto_logged = 1",
                (task_id, user_id),
            )
            conn.execute(
                """
                INSERT INTO time_logs(id, task_id, user_id, minutes, logged_at, is_auto_logged)
                VALUES (?, ?, ?, ?, ?, 1)
                """,
                (entry.id, task_id, user_id, entry.minutes, now),
            )
        return entry

    @_storage_errors
    def delete_auto_entries(self, task_id: str, user_id: str) -> int | None:
        """
        Remove every auto entry of task + user, unless the task is "done" again.

        Returns the number of rows removed, or None when a later completion
        already superseded this retraction (its credit is left in place).
        """
        with self._write_txn() as conn:
            row = conn.execute(
                "SELECT status FROM tasks WHERE id = ? AND user_id = ?",
                (task_id, user_id),
            ).fetchone()
            if row is not None and TaskStatus.from_db(row["status"]) is TaskStatus.DONE:
                return None
            cur = conn.execute(
                "DELETE FROM time_logs WHERE task_id = ? AND user_id = ? AND is_auto_logged = 1",
                (task_id, user_id),
            )
            return int(cur.rowcount)

    @_storage_errors
    def list_entries(self, task_id: str, user_id: str) -> list[TimeEntry]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT *
                FROM time_logs
                WHERE task_id = ? AND user_id = ?
                ORDER BY logged_at ASC, rowid ASC
                """,
                (task_id, user_id),
            ).fetchall()
            return [self._row_to_entry(r) for r in rows]
        finally:
            conn.close()

    @_storage_errors
    def daily_totals_for_user(self, user_id: str) -> list[DailyLedgerRow]:
        """One row per UTC calendar day of the user's ledger, newest day first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT date(logged_at, 'unixepoch') AS day,
                       SUM(minutes) AS total_minutes,
                       COUNT(*) AS log_count
                FROM time_logs
                WHERE user_id = ?
                GROUP BY day
                ORDER BY day DESC
                """,
                (user_id,),
            ).fetchall()
            return [
                DailyLedgerRow(
                    date=str(r["day"]),
                    total_minutes=int(r["total_minutes"] or 0),
                    log_count=int(r["log_count"]),
                )
                for r in rows
            ]
        finally:
            conn.close()

    @_storage_errors
    def daily_totals_by_user(self) -> list[DailyUserLedgerRow]:
        """
        One row per (UTC day, user, auto flag) across the whole ledger.

        Ordered newest day first, then by username, manual before auto.
        """
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT date(l.logged_at, 'unixepoch') AS day,
                       l.user_id AS user_id,
                       u.username AS username,
                       l.is_auto_logged AS is_auto_logged,
                       SUM(l.minutes) AS minutes,
                       COUNT(*) AS log_count
                FROM time_logs AS l
                LEFT JOIN users AS u ON u.id = l.user_id
                GROUP BY day, l.user_id, u.username, l.is_auto_logged
                ORDER BY day DESC, COALESCE(u.username, l.user_id) ASC, l.is_auto_logged ASC
                """
            ).fetchall()
            return [
                DailyUserLedgerRow(
                    date=str(r["day"]),
                    user_id=str(r["user_id"]),
                    username=r["username"],
                    auto=bool(r["is_auto_logged"]),
                    minutes=int(r["minutes"] or 0),
                    log_count=int(r["log_count"]),
                )
                for r in rows
            ]
        finally:
            conn.close()
