from __future__ import annotations
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from core.errors import ServerPropertiesError
from core.schedule import format_schedule
from core.settings import DEFAULT_MOTD_PREFIX

log = logging.getLogger(__name__)

MOTD_RE = re.compile(r"motd=(.*)")
LEVEL_NAME_RE = re.compile(r"level-name=(.*)")
SERVER_VERSION_RE = re.compile(r"server-version=(.*)")


@dataclass
class ServerProperties:
    path: Path
    text: str
    level_name: str
    server_version: str


def shutdown_banner(scheduled_at: datetime, prefix: str = DEFAULT_MOTD_PREFIX) -> str:
    """motd value: two colored lines, written with the escapes server.properties expects."""
    return f"\\u00a73{prefix}\\u00a7r\\n\\u00a76Shutdown at {format_schedule(scheduled_at)}"


def extract_field(pattern: re.Pattern, text: str, name: str) -> str:
    m = pattern.search(text)
    if m is None:
        raise ServerPropertiesError(f"'{name}' missing from server.properties")
    return m.group(1).strip()


def rewrite_motd(text: str, banner: str) -> str:
    # every motd= line is replaced, not just the first
    return MOTD_RE.sub(lambda _m: f"motd={banner}", text)


def write_atomic(path: Path, text: str) -> bool:
    """Write to a sibling .tmp file, then rename it over `path`."""
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        log.error(f"[CONFIG] Couldn't write to {tmp}: {e}")
        return False
    try:
        os.replace(tmp, path)
    except OSError as e:
        log.error(f"[CONFIG] Failed to replace {path} with {tmp}: {e}")
        return False
    return True


def apply_shutdown_banner(path: Path, scheduled_at: datetime,
                          prefix: str = DEFAULT_MOTD_PREFIX) -> ServerProperties:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except OSError as e:
        raise ServerPropertiesError(f"Failed to open {path}: {e}") from e

    text = rewrite_motd(text, shutdown_banner(scheduled_at, prefix))
    props = ServerProperties(
        path=path,
        text=text,
        level_name=extract_field(LEVEL_NAME_RE, text, "level-name"),
        server_version=extract_field(SERVER_VERSION_RE, text, "server-version"),
    )

    if write_atomic(path, text):
        log.info("[CONFIG] Server motd updated")
    return props
