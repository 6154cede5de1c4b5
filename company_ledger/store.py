"""In-memory owner of the ordered entry collection.

The collection is held as an immutable tuple and replaced wholesale, so a
reader holding ``store.entries`` always sees one consistent snapshot. Every
replacement is written in full to the backing :class:`KeyValueStorage`; there
is no incremental diff.

Persistence failures never reach callers: a load that cannot decode the
stored document starts from an empty ledger, and a failed write is logged and
otherwise ignored. The undecodable document is copied to ``<key>.corrupt``
before the first write replaces it.
"""

from __future__ import annotations

import json
import time
from collections import Counter
from collections.abc import Callable, Iterable

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from .balance import recompute
from .errors import PersistenceReadError
from .logging_setup import get_logger
from .models import ENTRY_LIST_ADAPTER, LedgerEntry
from .storage import LEDGER_KEY, KeyValueStorage

_logger = get_logger("company_ledger.store")

CORRUPT_SUFFIX = ".corrupt"


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def decode_entries(text: str | None) -> tuple[LedgerEntry, ...]:
    """Parse a stored JSON array of entries.

    Missing or blank text is an empty ledger. Anything else that doesn't
    validate raises :class:`PersistenceReadError`.
    """

    if text is None or not text.strip():
        return ()
    try:
        return tuple(ENTRY_LIST_ADAPTER.validate_json(text))
    except PydanticValidationError as e:
        raise PersistenceReadError(f"stored ledger is malformed: {e.error_count()} error(s)") from e


def encode_entries(entries: Iterable[LedgerEntry]) -> str:
    return json.dumps(
        [e.to_record() for e in entries], ensure_ascii=False, separators=(",", ":")
    )


class EntryStore:
    """Ordered ledger entries plus load/save hooks to a storage backend."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = LEDGER_KEY,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock
        self._entries: tuple[LedgerEntry, ...] = ()
        self._version = 0
        self._last_id = 0
        # Raw stored text that failed to decode; kept until backed up.
        self._unreadable: str | None = None

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return self._entries

    @property
    def version(self) -> int:
        """Counter bumped on every replacement; used to invalidate views."""

        return self._version

    def load(self) -> tuple[LedgerEntry, ...]:
        """Load the persisted collection, falling back to an empty ledger.

        Stored balances are discarded and recomputed.
        """

        raw: str | None = None
        try:
            raw = self._storage.read(self._key)
            entries = decode_entries(raw)
        except (PersistenceReadError, OSError, UnicodeDecodeError, SQLAlchemyError):
            self._unreadable = raw
            _logger.warning(
                "store:load_failed; starting with an empty ledger key=%s",
                self._key,
                exc_info=True,
            )
            entries = ()

        dupes = [i for i, n in Counter(e.id for e in entries).items() if n > 1]
        if dupes:
            _logger.warning("store:duplicate_ids ids=%s", sorted(dupes))

        self._entries = recompute(entries)
        self._version += 1
        if entries:
            self._last_id = max(self._last_id, max(e.id for e in entries))
        _logger.info("store:loaded entries=%d", len(self._entries))
        return self._entries

    def replace_all(self, entries: Iterable[LedgerEntry]) -> None:
        """Swap in a new collection and write it to storage."""

        snapshot = tuple(entries)
        self._entries = snapshot
        self._version += 1
        self._persist(snapshot)

    @property
    def backup_key(self) -> str:
        return self._key + CORRUPT_SUFFIX

    def _backup_unreadable(self) -> bool:
        """Copy undecodable stored text aside; ``False`` if that failed."""

        if self._unreadable is None:
            return True
        try:
            self._storage.write(self.backup_key, self._unreadable)
        except Exception:
            _logger.warning(
                "store:backup_failed key=%s; keeping the unreadable ledger in place",
                self.backup_key,
                exc_info=True,
            )
            return False
        _logger.warning("store:unreadable_saved key=%s", self.backup_key)
        self._unreadable = None
        return True

    def _persist(self, snapshot: tuple[LedgerEntry, ...]) -> None:
        if not self._backup_unreadable():
            return
        try:
            self._storage.write(self._key, encode_entries(snapshot))
        except Exception:
            # Persistence is fire-and-forget; the in-memory ledger stays authoritative.
            _logger.warning(
                "store:write_failed key=%s entries=%d", self._key, len(snapshot), exc_info=True
            )

    def next_id(self) -> int:
        """Return an id greater than every id issued or loaded so far.

        Ids are millisecond timestamps when the clock has advanced past the
        last id, otherwise the last id plus one.
        """

        candidate = self._clock()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate
