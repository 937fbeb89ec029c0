from __future__ import annotations
import logging
import shutil
from pathlib import Path

from core.errors import ServerJarError

log = logging.getLogger(__name__)


def version_jar(version: str, jars_dir: Path) -> Path:
    return Path(jars_dir) / f"{version}.jar"


def install_server_jar(version: str, jars_dir: Path, target: Path) -> Path:
    """Copy jars/<version>.jar over server.jar."""
    src = version_jar(version, jars_dir)
    try:
        shutil.copyfile(src, target)
    except OSError as e:
        raise ServerJarError(f"Failed to copy {src} to {target}: {e}") from e
    log.info(f"[SERVER] {src} -> {target}")
    return Path(target)
