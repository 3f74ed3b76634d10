"""
Cooldown Registry — tracks which upstream error codes are cooling down.

Callers record a cooldown when the upstream API signals a rate limit or
lockout, and check it before making further calls.

Behavioral Contract:
- The settings document is the source of truth. The in-memory mapping is
  rebuilt from it at construction and on every store change notification.
- Every set_cooldown writes the settings document once, changed or not.
- clear_cooldown writes only when an entry was actually removed.
- Active status is always computed against the clock, never cached.
- Expired entries stay until cleared.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from cooldown_registry.models.cooldown import CooldownEntry, utc_now
from cooldown_registry.models.error_codes import ErrorCode
from cooldown_registry.models.settings import ErrorCooldownSetting, SettingsSnapshot
from cooldown_registry.settings.store import SettingsStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class CooldownRegistry:
    """
    In-memory view of the error cooldowns held in the settings document.
    Safe to share between threads.
    """

    def __init__(self, settings_store: SettingsStore, clock: Optional[Clock] = None):
        self._store = settings_store
        self._clock = clock or utc_now
        self._cooldowns: Dict[ErrorCode, CooldownEntry] = {}
        # Lock order: _persist_lock, then _lock, then the store's own lock.
        # _lock is never held while calling persist(), which notifies
        # every registry sharing the store.
        self._lock = threading.Lock()
        self._persist_lock = threading.Lock()

        self._unsubscribe = self._store.on_change(lambda _snapshot: self.load_from_settings())
        try:
            self.load_from_settings()
        except Exception:
            self._unsubscribe()
            raise

    @property
    def settings_store(self) -> SettingsStore:
        return self._store

    def now(self) -> datetime:
        """Current time according to the registry's clock."""
        return self._clock()

    # --- Queries ---

    def is_in_cooldown(self, code: ErrorCode) -> bool:
        """True if `code` has an entry whose expiry is still in the future."""
        with self._lock:
            entry = self._cooldowns.get(code)
        return entry is not None and entry.is_active(self._clock())

    def get_cooldown_info(self, code: ErrorCode) -> Optional[CooldownEntry]:
        """The entry for `code`, expired or not, or None."""
        with self._lock:
            return self._cooldowns.get(code)

    def get_active_cooldowns(self) -> List[ErrorCode]:
        """Codes whose cooldown is currently active."""
        now = self._clock()
        with self._lock:
            entries = list(self._cooldowns.values())
        return [e.code for e in entries if e.is_active(now)]

    def get_all_cooldowns(self) -> Dict[ErrorCode, CooldownEntry]:
        """Copy of every entry, including expired ones."""
        with self._lock:
            return dict(self._cooldowns)

    # --- Mutations ---

    def set_cooldown(
        self,
        code: ErrorCode,
        until: Union[datetime, timedelta],
        reason: str,
    ) -> CooldownEntry:
        """
        Record a cooldown for `code` and persist it.

        `until` is either an absolute expiry or a duration from now. A prior
        entry for the same code is replaced outright.
        """
        if isinstance(until, timedelta):
            until = self._clock() + until
        elif not isinstance(until, datetime):
            raise TypeError(
                f"until must be a datetime or timedelta, not {type(until).__name__}"
            )

        entry = CooldownEntry(code=ErrorCode(code), until=until, reason=reason)

        with self._lock:
            self._cooldowns[entry.code] = entry
        with self._persist_lock:
            self._persist_entry(entry)

        logger.debug(
            "Set cooldown for error code %s: %s until %s",
            entry.code.name, reason, entry.until.isoformat(),
        )
        return entry

    def clear_cooldown(self, code: ErrorCode) -> bool:
        """
        Remove the cooldown for `code`. The settings document is only
        rewritten when an entry was removed. Returns whether one was.
        """
        with self._lock:
            removed = self._cooldowns.pop(code, None)
        if removed is None:
            return False

        with self._persist_lock:
            snapshot = self._store.current_value()
            remaining = [
                c for c in snapshot.error_cooldowns if c.error_code != int(code)
            ]
            if len(remaining) != len(snapshot.error_cooldowns):
                snapshot.error_cooldowns = remaining
                self._store.persist(snapshot)

        logger.debug("Cleared cooldown for error code %s", removed.code.name)
        return True

    def load_from_settings(self) -> int:
        """
        Rebuild the in-memory mapping from the settings document.

        Records with codes outside ErrorCode are logged and skipped. If the
        store cannot be read, the current mapping is left as it was.
        Returns the number of entries loaded.
        """
        # Read and swap under one lock so reloads land in the order the store
        # served them.
        with self._lock:
            snapshot = self._store.current_value()
            self._cooldowns = self._entries_from(snapshot)
            count = len(self._cooldowns)

        logger.debug("Loaded %d error cooldowns from settings", count)
        return count

    def close(self) -> None:
        """Stop following settings change notifications."""
        self._unsubscribe()

    # --- Internals ---

    def _persist_entry(self, entry: CooldownEntry) -> None:
        """Find-or-create the record for entry.code and write the document back."""
        snapshot = self._store.current_value()
        record = snapshot.find_cooldown(entry.code)
        if record is not None:
            record.cooldown_until = entry.until
            record.reason = entry.reason
            # Drop stray duplicates so the document holds one record per code.
            snapshot.error_cooldowns = [
                c for c in snapshot.error_cooldowns
                if c is record or c.error_code != int(entry.code)
            ]
        else:
            snapshot.error_cooldowns.append(ErrorCooldownSetting(
                error_code=int(entry.code),
                cooldown_until=entry.until,
                reason=entry.reason,
            ))
        self._store.persist(snapshot)

    @staticmethod
    def _entries_from(snapshot: SettingsSnapshot) -> Dict[ErrorCode, CooldownEntry]:
        entries: Dict[ErrorCode, CooldownEntry] = {}
        for record in snapshot.error_cooldowns:
            try:
                code = ErrorCode(record.error_code)
            except ValueError:
                logger.warning("Unknown error code %s found in settings", record.error_code)
                continue
            entries[code] = CooldownEntry(
                code=code,
                until=record.cooldown_until,
                reason=record.reason,
            )
        return entries
