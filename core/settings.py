# core/settings.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

from core.errors import SettingsError

APP_NAME = "Minecraft Smart Server Launching Thingy"
DEFAULT_MOTD_PREFIX = "Um abrigo em tempos de pandemia..."


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not 0 <= value < float("inf"):
        raise SettingsError(f"{name} must be a finite, non-negative number of seconds (got '{raw}')")
    return value


def load_env(root: Path | None = None) -> Path | None:
    """Load `env` or `.env` from root (prefer 'env'); returns the file used, if any."""
    root = Path(root or Path.cwd())
    for fname in ("env", ".env"):
        env_path = root / fname
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


@dataclass
class LauncherContext:
    """Paths and knobs shared by the launcher, read from env (or elsewhere)."""
    app_name: str = APP_NAME
    webhook_file: Path = Path("discord.webhook")
    server_properties: Path = Path("server.properties")
    lock_file: Path = Path("server.lock")
    jars_dir: Path = Path("jars")
    server_jar: Path = Path("server.jar")
    java_cmd: str = "java"
    java_xmx: str = "2048M"
    java_xms: str = "1024M"
    poll_interval: float = 1.0
    grace_period: float = 5.0
    motd_prefix: str = DEFAULT_MOTD_PREFIX
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "LauncherContext":
        return cls(
            app_name=os.getenv("APP_NAME", APP_NAME),
            webhook_file=Path(os.getenv("WEBHOOK_FILE", "discord.webhook")),
            server_properties=Path(os.getenv("SERVER_PROPERTIES", "server.properties")),
            lock_file=Path(os.getenv("LOCK_FILE", "server.lock")),
            jars_dir=Path(os.getenv("JARS_DIR", "jars")),
            server_jar=Path(os.getenv("SERVER_JAR", "server.jar")),
            java_cmd=os.getenv("JAVA_CMD", "java"),
            java_xmx=os.getenv("JAVA_XMX", "2048M"),
            java_xms=os.getenv("JAVA_XMS", "1024M"),
            poll_interval=_env_float("SUPERVISOR_POLL_SEC", "1"),
            grace_period=_env_float("SHUTDOWN_GRACE_SEC", "5"),
            motd_prefix=os.getenv("MOTD_PREFIX", DEFAULT_MOTD_PREFIX),
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
        )
