"""Key-value persistence backends for the serialized ledger.

The ledger is persisted as one JSON document under a single key, so a
backend only has to read and write opaque text. Three backends are provided:

- ``MemoryStorage``: dict-backed; used in tests and for embedding.
- ``JsonFileStorage``: one ``<key>.json`` file per key under a directory, or a
  single explicit file. Writes target ``.tmp`` first and then ``os.replace``
  into place.
- ``SqlStorage``: a ``ledger_kv`` table managed through SQLAlchemy; any URL
  SQLAlchemy supports works (e.g. ``sqlite+pysqlite:///ledger.db``).
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Protocol

from sqlalchemy import DateTime, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .config import LedgerSettings
from .logging_setup import get_logger

LEDGER_KEY = "ledgerEntries"

_logger = get_logger("company_ledger.storage")


class KeyValueStorage(Protocol):
    def read(self, key: str) -> str | None:
        """Return the stored text for ``key`` or ``None`` when absent."""
        ...

    def write(self, key: str, text: str) -> None: ...


# ----------------------------------------------------------------------------
# In-memory
# ----------------------------------------------------------------------------


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, text: str) -> None:
        self.data[key] = text


# ----------------------------------------------------------------------------
# JSON file
# ----------------------------------------------------------------------------


class JsonFileStorage:
    """File-backed storage.

    With ``path`` pointing at a ``.json`` file, ``primary_key`` maps to that
    file and side keys such as ``<primary_key>.corrupt`` map to siblings
    (``ledger.json`` -> ``ledger.corrupt.json``). Otherwise ``path`` is a
    directory and each key gets its own ``<key>.json``.
    """

    def __init__(self, path: Path | str, *, primary_key: str = LEDGER_KEY) -> None:
        self._path = Path(path)
        self._primary_key = primary_key

    def _file_for(self, key: str) -> Path:
        if self._path.suffix != ".json":
            return self._path / f"{key}.json"
        if key == self._primary_key:
            return self._path
        side = key.removeprefix(self._primary_key + ".")
        return self._path.with_name(f"{self._path.stem}.{side}{self._path.suffix}")

    def read(self, key: str) -> str | None:
        path = self._file_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        path = self._file_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        # Write atomically, cleaning up the temp file on failure
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise


# ----------------------------------------------------------------------------
# SQL key-value table
# ----------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class LedgerKv(Base):
    __tablename__ = "ledger_kv"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )


class SqlStorage:
    """Key-value storage on a single SQLAlchemy table.

    The table is created at construction when missing.
    """

    def __init__(self, database_url: str | None = None, *, engine: Engine | None = None) -> None:
        if engine is None:
            if not database_url:
                raise RuntimeError("SqlStorage requires a database URL or an engine")
            engine = create_engine(database_url, pool_pre_ping=True)
        self._engine = engine
        self._session_maker = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        Base.metadata.create_all(bind=engine, tables=[LedgerKv.__table__])

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""

        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def read(self, key: str) -> str | None:
        with self.session_scope() as session:
            return session.execute(
                select(LedgerKv.value).where(LedgerKv.key == key)
            ).scalar_one_or_none()

    def write(self, key: str, text: str) -> None:
        with self.session_scope() as session:
            row = session.get(LedgerKv, key)
            if row is None:
                session.add(LedgerKv(key=key, value=text))
            else:
                row.value = text
                row.updated_at = func.current_timestamp()


def storage_from_settings(settings: LedgerSettings) -> KeyValueStorage:
    """Pick the backend configured by ``settings``.

    ``LEDGER_DATABASE_URL`` selects :class:`SqlStorage`; otherwise the ledger
    lives in ``settings.data_file``.
    """

    if settings.database_url:
        _logger.debug("storage:sql")
        return SqlStorage(settings.database_url)
    _logger.debug("storage:file path=%s", os.fspath(settings.data_file))
    return JsonFileStorage(settings.data_file)
