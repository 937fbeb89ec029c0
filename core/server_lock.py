# core/server_lock.py
from __future__ import annotations
import getpass
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.errors import LockAcquireError, LockReleaseError, ServerLockedError

log = logging.getLogger(__name__)


def current_operator() -> str:
    """Name of the invoking user (what `whoami` prints)."""
    return getpass.getuser().strip()


@dataclass(frozen=True)
class LockRecord:
    path: Path
    identity: str


@dataclass
class ServerLock:
    """Advisory single-instance marker; an existing marker is never overwritten."""
    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def holder(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def try_acquire(self, identity: Optional[str] = None) -> LockRecord:
        if identity is None:
            try:
                identity = current_operator()
            except (OSError, KeyError) as e:
                raise LockAcquireError(f"Unable to resolve the current user: {e}") from e

        try:
            f = open(self.path, "x", encoding="utf-8")
        except FileExistsError:
            try:
                holder = self.path.read_text(encoding="utf-8")
            except OSError as e:
                log.error(f"[LOCK] Failed to read {self.path} contents: {e}")
                holder = "<unreadable>"
            raise ServerLockedError(self.path, holder) from None

        try:
            with f:
                f.write(identity)
        except (OSError, UnicodeError) as e:
            # an empty marker would lock out every later launch
            self.path.unlink(missing_ok=True)
            raise LockAcquireError(f"Couldn't write to {self.path}: {e}") from e
        log.info(f"[LOCK] {self.path} created for '{identity}'")
        return LockRecord(self.path, identity)

    def release(self) -> None:
        try:
            self.path.unlink()
        except OSError as e:
            raise LockReleaseError(f"Failed to delete {self.path}: {e}") from e
        log.info(f"[LOCK] {self.path} deleted")
