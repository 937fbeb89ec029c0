"""
ServerLauncher.py — launch a Minecraft server with a scheduled shutdown.
- Run from the server directory (discord.webhook, server.properties, jars/).
- Stamps the shutdown time into the motd, takes server.lock, posts to Discord,
  then supervises the server until it exits or the scheduled time arrives.
- Non-interactive: --at HH:MM skips the prompts.
"""

import os, sys, logging, argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# --- Ensure repo root is importable (so `core.*`, `services.*` resolve) ---
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.errors import LauncherError, ScheduleError, ServerLockedError
from core.process_supervisor import ServerProcess, ShutdownSupervisor, build_server_command
from core.schedule import format_schedule, parse_hhmm, prompt_schedule, resolve
from core.server_lock import ServerLock
from core.settings import LauncherContext, load_env
from services.discord_webhook import notify_launch, notify_shutdown, read_webhook_url
from services.server_jar import install_server_jar
from services.server_properties import apply_shutdown_banner

log = logging.getLogger("ServerLauncher")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_LOCKED = 2


# ---------- Logging ----------
def setup_logging(log_dir: Path) -> None:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "launcher.log", encoding="utf-8"),
        ],
    )


def resolve_schedule(at: Optional[str]) -> datetime:
    if at:
        hour, minute = parse_hhmm(at)
        return resolve(hour, minute, datetime.now())
    return prompt_schedule()


def launch(ctx: LauncherContext, at: Optional[str] = None) -> int:
    print(f"{ctx.app_name.upper()}\n\n")

    webhook_url = read_webhook_url(ctx.webhook_file)
    log.info(f"[DISCORD] Discord webhook URL: '{webhook_url}'")

    scheduled_at = resolve_schedule(at)
    log.info(f"[SCHEDULE] Shutdown scheduled for {format_schedule(scheduled_at)}")

    props = apply_shutdown_banner(ctx.server_properties, scheduled_at, ctx.motd_prefix)

    lock = ServerLock(ctx.lock_file)
    try:
        record = lock.try_acquire()
    except ServerLockedError as e:
        log.warning(f"[LOCK] Found {e.path} file!")
        log.warning("[LOCK] Server is currently being run by another user or shutdown did not clear the lock file.")
        log.warning(f"[LOCK] {e.path} contents: '{e.holder}'")
        return EXIT_LOCKED

    try:
        install_server_jar(props.server_version, ctx.jars_dir, ctx.server_jar)
        notify_launch(webhook_url, ctx.app_name, props.level_name, props.server_version,
                      record.identity, scheduled_at)
        log.info(f"[SERVER] Starting '{props.level_name}' using Minecraft {props.server_version}")
        process = ServerProcess(build_server_command(ctx.java_cmd, ctx.java_xmx, ctx.java_xms,
                                                     str(ctx.server_jar)))
        process.start()
    except LauncherError:
        # nothing is running yet, so the lock is ours to clear
        lock.release()
        raise

    supervisor = ShutdownSupervisor(
        process,
        scheduled_at,
        lock,
        on_shutdown=lambda: notify_shutdown(webhook_url, ctx.app_name),
        poll_interval=ctx.poll_interval,
        grace_period=ctx.grace_period,
    )
    supervisor.run()
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Launch the server with a scheduled shutdown")
    ap.add_argument("--at", default=None,
                    help="Shutdown time HH:MM (skips the interactive prompt)")
    args = ap.parse_args(argv)

    load_env()
    try:
        ctx = LauncherContext.from_env()
    except LauncherError as e:
        setup_logging(Path(os.getenv("LOG_DIR", "logs")))
        log.critical(f"[ERROR] {e}")
        return EXIT_FATAL
    setup_logging(ctx.log_dir)

    try:
        return launch(ctx, args.at or os.getenv("SHUTDOWN_AT"))
    except ScheduleError as e:
        log.critical(f"[SCHEDULE] {e}")
        return EXIT_FATAL
    except LauncherError as e:
        log.critical(f"[ERROR] {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
