"""
Settings Store — owns the persisted settings document.

Read by: CooldownRegistry on construction and on every change notification
Written by: CooldownRegistry on set/clear

Behavioral Contract:
- current_value() hands out a private copy; callers mutate it freely and
  write it back with persist().
- persist() overwrites the whole document, then notifies every subscriber,
  including the one that caused the write.
- Subscribers are called outside the store's lock.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

from cooldown_registry.models.settings import SettingsSnapshot, SettingsStoreConfig

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[SettingsSnapshot], None]

# (st_mtime_ns, st_size, st_ino)
FileSignature = Tuple[int, int, int]


class SettingsStoreError(Exception):
    """Raised when the settings document cannot be read or written."""
    pass


class SettingsStore:
    """Base class for settings stores with change subscriptions."""

    def __init__(self):
        self._subscribers: List[ChangeCallback] = []
        self._subscribers_lock = threading.Lock()

    def current_value(self) -> SettingsSnapshot:
        raise NotImplementedError

    def persist(self, snapshot: SettingsSnapshot) -> None:
        raise NotImplementedError

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """Subscribe to snapshot changes. Returns an unsubscribe function."""
        with self._subscribers_lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, snapshot: SettingsSnapshot) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(snapshot.model_copy(deep=True))


class InMemorySettingsStore(SettingsStore):
    """Thread-safe settings store held entirely in memory."""

    def __init__(self, snapshot: Optional[SettingsSnapshot] = None):
        super().__init__()
        self._lock = threading.Lock()
        self._snapshot = snapshot.model_copy(deep=True) if snapshot is not None else SettingsSnapshot()

    def current_value(self) -> SettingsSnapshot:
        with self._lock:
            return self._snapshot.model_copy(deep=True)

    def persist(self, snapshot: SettingsSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot.model_copy(deep=True)
        self._notify(snapshot)


class JsonFileSettingsStore(SettingsStore):
    """
    Settings document kept as a JSON file.

    The parsed document is cached against the file's signature (mtime in
    nanoseconds, size and inode), so edits made by other processes, including
    an atomic replace, are picked up on the next read. check_for_changes()
    polls for such edits and notifies subscribers when one is found.
    """

    def __init__(self, config: Optional[SettingsStoreConfig] = None):
        super().__init__()
        self.config = config or SettingsStoreConfig()
        self._lock = threading.Lock()
        self._cache: Optional[SettingsSnapshot] = None
        self._signature: Optional[FileSignature] = None

    @property
    def path(self):
        return self.config.path

    def current_value(self) -> SettingsSnapshot:
        with self._lock:
            return self._load_locked().model_copy(deep=True)

    def persist(self, snapshot: SettingsSnapshot) -> None:
        payload = json.dumps(snapshot.to_document(), indent=self.config.indent)
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(payload)
                    os.replace(tmp_name, self.path)
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
                self._signature = self._current_signature()
            except OSError as exc:
                raise SettingsStoreError(f"Failed to write settings to {self.path}") from exc
            self._cache = snapshot.model_copy(deep=True)
        self._notify(snapshot)

    def check_for_changes(self) -> bool:
        """
        Reload the document if the file changed underneath the store.
        Returns True, after notifying subscribers, when a change was found.
        """
        with self._lock:
            if self._current_signature() == self._signature and self._cache is not None:
                return False
            self._cache = None
            snapshot = self._load_locked().model_copy(deep=True)
        logger.info("Settings file %s changed externally; reloading", self.path)
        self._notify(snapshot)
        return True

    def _current_signature(self) -> Optional[FileSignature]:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SettingsStoreError(f"Failed to stat settings file {self.path}") from exc
        return (stat.st_mtime_ns, stat.st_size, stat.st_ino)

    def _load_locked(self) -> SettingsSnapshot:
        signature = self._current_signature()
        if self._cache is not None and signature == self._signature:
            return self._cache

        if signature is None:
            snapshot = SettingsSnapshot()
        else:
            try:
                raw = self.path.read_text(encoding="utf-8")
                snapshot = SettingsSnapshot.model_validate(json.loads(raw) if raw.strip() else {})
            except OSError as exc:
                raise SettingsStoreError(f"Failed to read settings from {self.path}") from exc
            except (ValueError, ValidationError) as exc:
                raise SettingsStoreError(f"Malformed settings document at {self.path}") from exc

        self._cache = snapshot
        self._signature = signature
        return snapshot
