from __future__ import annotations

import logging
import os
import re
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import declarative_base

from .errors import StoreError

logger = logging.getLogger(__name__)

# declarative base for salon_pos.models
Base = declarative_base()

LOCAL_NOW = text("(datetime('now', 'localtime'))")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SIDECARS = ("-wal", "-shm", "-journal")


# per-connection PRAGMAs
def _on_connect(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA busy_timeout=60000;")
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA synchronous=NORMAL;")
    finally:
        cur.close()


def _row_to_dict(row) -> Dict[str, Any]:
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


class Store:
    """Owns the SQLite file behind the POS.

    Every statement commits on its own (WAL journal), so ``save()`` only has to
    fold the log back into the main file. A background thread does that every
    ``autosave_interval`` seconds; ``close()`` does it one last time.
    """

    def __init__(
        self,
        db_path,
        autosave_interval: float = 30.0,
        action_log_path=None,
        seed_defaults: Optional[Dict[str, str]] = None,
    ):
        self.db_path = Path(db_path)
        self.autosave_interval = autosave_interval
        if action_log_path is None:
            action_log_path = self.db_path.parent / "pos-actions.log"
        self.action_log_path = Path(action_log_path)
        self.seed_defaults = dict(seed_defaults or {})
        self.engine: Optional[Engine] = None
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._autosave: Optional[threading.Thread] = None
        self._known_columns: set = set()

    @classmethod
    def from_settings(cls, cfg) -> "Store":
        return cls(
            cfg.db_path,
            autosave_interval=cfg.autosave_seconds,
            action_log_path=cfg.action_log_path,
            seed_defaults={
                "business_name": cfg.business_name,
                "admin_pin": cfg.default_admin_pin,
                "currency_symbol": cfg.currency_symbol,
            },
        )

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    # ---------- lifecycle ----------
    def initialize(self) -> None:
        """Open (or create) the file, migrate, seed and start autosaving.

        Any failure here propagates: the app cannot run without its database.
        """
        from .ops import bootstrap

        if self.engine is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            "sqlite:///" + str(self.db_path).replace("\\", "/"),
            connect_args={"check_same_thread": False, "timeout": 60},
        )
        event.listen(engine, "connect", _on_connect)
        self.engine = engine
        self._known_columns = set()
        try:
            bootstrap.prepare(self)
        except Exception:
            logger.exception("Database initialization failed for %s", self.db_path)
            self.engine = None
            engine.dispose()
            raise
        self._start_autosave()
        logger.info("Database initialized at %s", self.db_path)

    def close(self) -> None:
        if self._autosave is not None:
            self._stop.set()
            self._autosave.join(timeout=5)
            self._autosave = None
        if self.engine is None:
            return
        self.save()
        with self._lock:
            self.engine.dispose()
            self.engine = None
            self._known_columns = set()
        logger.info("Database connection closed")

    def _start_autosave(self) -> None:
        if not self.autosave_interval or self.autosave_interval <= 0:
            return
        self._stop = threading.Event()
        self._autosave = threading.Thread(
            target=self._autosave_loop,
            args=(self._stop,),
            name="pos-autosave",
            daemon=True,
        )
        self._autosave.start()

    def _autosave_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.autosave_interval):
            self.save()

    def _engine(self) -> Engine:
        if self.engine is None:
            raise StoreError("Database is not open")
        return self.engine

    # ---------- statements ----------
    def run(self, sql: str, params: Optional[Dict[str, Any]] = None, conn: Optional[Connection] = None):
        """Execute a write; returns the last inserted row id."""
        if conn is not None:
            return conn.execute(text(sql), params or {}).lastrowid
        with self._lock, self._engine().begin() as c:
            return c.execute(text(sql), params or {}).lastrowid

    def get(self, sql: str, params: Optional[Dict[str, Any]] = None, conn: Optional[Connection] = None):
        if conn is not None:
            row = conn.execute(text(sql), params or {}).fetchone()
            return _row_to_dict(row) if row is not None else None
        with self._lock, self._engine().connect() as c:
            row = c.execute(text(sql), params or {}).fetchone()
            return _row_to_dict(row) if row is not None else None

    def all(
        self, sql: str, params: Optional[Dict[str, Any]] = None, conn: Optional[Connection] = None
    ) -> List[Dict[str, Any]]:
        if conn is not None:
            return [_row_to_dict(r) for r in conn.execute(text(sql), params or {}).fetchall()]
        with self._lock, self._engine().connect() as c:
            return [_row_to_dict(r) for r in c.execute(text(sql), params or {}).fetchall()]

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """All statements run on the yielded connection commit or roll back together."""
        with self._lock, self._engine().begin() as conn:
            yield conn

    def ensure_column(self, table: str, column: str, definition: str, conn: Optional[Connection] = None) -> bool:
        """Add ``column`` to ``table`` unless the live schema already has it.

        Returns True when the column was added.
        """
        for name in (table, column):
            if not _IDENTIFIER.match(name):
                raise ValueError(f"invalid identifier: {name!r}")
        if (table, column) in self._known_columns:
            return False
        cols = self.all(f"PRAGMA table_info({table})", conn=conn)
        added = False
        if not any(c["name"] == column for c in cols):
            self.run(f"ALTER TABLE {table} ADD COLUMN {column} {definition}", conn=conn)
            logger.info("Added column %s.%s", table, column)
            added = True
        self._known_columns.add((table, column))
        return added

    # ---------- persistence ----------
    def save(self) -> bool:
        """Checkpoint the WAL into the database file. Errors are logged, not raised."""
        if self.engine is None:
            return False
        try:
            with self._lock, self.engine.connect() as conn:
                conn.exec_driver_sql("PRAGMA wal_checkpoint(TRUNCATE);")
        except Exception:
            logger.exception("Database save failed for %s", self.db_path)
            return False
        return True

    def backup(self, destination) -> Path:
        """Write a consistent snapshot of the live database to ``destination``."""
        dest = Path(destination)
        if dest.exists() and dest.resolve() == self.db_path.resolve():
            raise StoreError("Backup destination is the live database")
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_name(f".tmp-{dest.name}")
        try:
            with self._lock:
                raw = self._engine().raw_connection()
                try:
                    target = sqlite3.connect(str(tmp))
                    try:
                        raw.driver_connection.backup(target)
                    finally:
                        target.close()
                finally:
                    raw.close()
            os.replace(tmp, dest)
        finally:
            if tmp.exists():
                tmp.unlink()
        logger.info("Database backup written to %s", dest)
        return dest

    def restore(self, source) -> None:
        """Replace the live database with ``source``.

        The previous file is kept as ``<db>.temp`` until the restored file has
        been opened and migrated; if that fails the previous file comes back.
        """
        src = Path(source)
        if not src.is_file():
            raise StoreError(f"Backup file not found: {src}")
        if self.db_path.exists() and src.resolve() == self.db_path.resolve():
            raise StoreError("Backup file is the live database")

        self.close()
        self._remove_sidecars()
        temp = self.db_path.with_name(self.db_path.name + ".temp")
        had_live = self.db_path.exists()
        if had_live:
            shutil.copyfile(self.db_path, temp)
        try:
            shutil.copyfile(src, self.db_path)
            self.initialize()
        except Exception as exc:
            logger.error("Restore from %s failed, rolling back: %s", src, exc)
            self.close()
            self._remove_sidecars()
            if had_live:
                shutil.copyfile(temp, self.db_path)
            elif self.db_path.exists():
                self.db_path.unlink()
            self.initialize()
            raise StoreError(f"Restore failed: {exc}") from exc
        finally:
            if temp.exists():
                temp.unlink()
        logger.info("Database restored from %s", src)

    def _remove_sidecars(self) -> None:
        for suffix in _SIDECARS:
            p = self.db_path.with_name(self.db_path.name + suffix)
            if p.exists():
                p.unlink()
