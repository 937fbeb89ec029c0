from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import requests

from core.errors import WebhookConfigError
from core.schedule import format_schedule

log = logging.getLogger(__name__)

AVATAR_URL = "https://i.imgur.com/KeSlNUv.png"
FOOTER_ICON_URL = "https://i.imgur.com/DHgRvnF.png"
EMBED_COLOR = 3451439


def read_webhook_url(path: Path) -> str:
    path = Path(path)
    try:
        url = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        raise WebhookConfigError(f"Discord webhook URL missing! ({path})") from None
    except OSError as e:
        raise WebhookConfigError(f"Failed to read webhook URL from {path}: {e}") from e
    if not url:
        raise WebhookConfigError(f"Discord webhook URL missing! ({path} is empty)")
    return url


def _code(value: Any) -> str:
    return f"`{value}`"


def launch_message(app_name: str, level_name: str, version: str, host: str,
                   scheduled_at: datetime) -> Dict[str, Any]:
    return {
        "content": "Launching server...",
        "username": app_name,
        "avatar_url": AVATAR_URL,
        "embeds": [{
            "color": EMBED_COLOR,
            "footer": {"icon_url": FOOTER_ICON_URL, "text": "Server Info"},
            "fields": [
                {"name": "Level Name:", "value": _code(level_name), "inline": True},
                {"name": "Minecraft Version:", "value": _code(version), "inline": True},
                {"name": "Server Host:", "value": _code(host), "inline": True},
                {"name": "Shutdown scheduled for:", "value": _code(format_schedule(scheduled_at))},
            ],
        }],
    }


def shutdown_message(app_name: str) -> Dict[str, Any]:
    return {"content": "Server has shutdown.", "username": app_name, "avatar_url": AVATAR_URL}


def post_webhook(url: str, payload: Dict[str, Any]) -> bool:
    """Single POST, no retry; failures are logged and swallowed."""
    try:
        r = requests.post(url, json=payload)
        r.raise_for_status()
    except requests.RequestException as e:
        log.warning(f"[DISCORD] Failed to send message to Discord webhook: {e}")
        return False
    log.info("[DISCORD] Sent message to Discord webhook")
    return True


def notify_launch(url: str, app_name: str, level_name: str, version: str, host: str,
                  scheduled_at: datetime) -> bool:
    return post_webhook(url, launch_message(app_name, level_name, version, host, scheduled_at))


def notify_shutdown(url: str, app_name: str) -> bool:
    return post_webhook(url, shutdown_message(app_name))
