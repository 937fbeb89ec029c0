# core/errors.py
from __future__ import annotations


class LauncherError(RuntimeError):
    """Base for errors that abort the launcher."""


class WebhookConfigError(LauncherError):
    pass


class ServerPropertiesError(LauncherError):
    pass


class ServerJarError(LauncherError):
    pass


class ServerSpawnError(LauncherError):
    pass


class LockAcquireError(LauncherError):
    pass


class LockReleaseError(LauncherError):
    pass


class ServerLockedError(LauncherError):
    """The lock marker already exists; `holder` is whatever it contains."""

    def __init__(self, path, holder: str) -> None:
        super().__init__(f"Server is locked by '{holder}' ({path})")
        self.path = path
        self.holder = holder


class SettingsError(LauncherError):
    """A configuration value from the environment is unusable."""


class ScheduleError(ValueError):
    pass
