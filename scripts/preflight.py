#!/usr/bin/env python3
"""
preflight.py — sanity-check a server directory before launching.
- Webhook file, server.properties fields, version jar, lock marker, java on PATH.
- Posts a test message to the webhook unless --offline.
- Writes LOG_DIR/preflight_summary.json; exit 0 if nothing failed.
"""
import os
import sys
import json
import uuid
import shutil
from pathlib import Path
from datetime import datetime, timezone
import argparse

import requests

# ---------- Core paths ----------
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.errors import ServerPropertiesError, WebhookConfigError
from core.server_lock import ServerLock
from core.settings import LauncherContext, load_env
from services.discord_webhook import read_webhook_url
from services.server_jar import version_jar
from services.server_properties import LEVEL_NAME_RE, SERVER_VERSION_RE, extract_field

# ---------- dotenv ----------
loaded = load_env()
if loaded:
    print(f"[ENV] loaded {loaded.name} from {loaded.parent}")
else:
    print("[ENV] no .env or env file found, relying on process env")

CTX = LauncherContext.from_env()


def _print(line: str):
    sys.stdout.write(line.rstrip() + "\n")
    sys.stdout.flush()

def _pass(msg: str): _print(msg)
def _fail(msg: str): _print(msg)
def _warn(msg: str): _print(msg)

def check_logdir(ctx: LauncherContext = CTX) -> bool:
    try:
        ctx.log_dir.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        _fail(f"[LOG_DIR] FAIL: cannot create {ctx.log_dir} ({e})")
        return False

    scratch = ctx.log_dir / f"_preflight_write_{uuid.uuid4().hex}.txt"
    try:
        scratch.write_text("ok", encoding="utf-8")
        scratch.unlink(missing_ok=True)
        _pass(f"[LOG_DIR] PASS: writable at {ctx.log_dir}")
        return True
    except Exception as e:
        _fail(f"[LOG_DIR] FAIL: not writable at {ctx.log_dir} ({e})")
        return False

def check_webhook_file(ctx: LauncherContext = CTX) -> bool:
    try:
        read_webhook_url(ctx.webhook_file)
    except WebhookConfigError as e:
        _fail(f"[WEBHOOK_FILE] FAIL: {e}")
        return False
    _pass(f"[WEBHOOK_FILE] PASS: {ctx.webhook_file}")
    return True

def _server_version(ctx: LauncherContext) -> str:
    text = ctx.server_properties.read_text(encoding="utf-8")
    extract_field(LEVEL_NAME_RE, text, "level-name")
    return extract_field(SERVER_VERSION_RE, text, "server-version")

def check_properties(ctx: LauncherContext = CTX) -> bool:
    try:
        version = _server_version(ctx)
    except (OSError, ServerPropertiesError) as e:
        _fail(f"[PROPERTIES] FAIL: {e}")
        return False
    _pass(f"[PROPERTIES] PASS: server-version={version}")
    return True

def check_jar(ctx: LauncherContext = CTX) -> bool:
    try:
        version = _server_version(ctx)
    except (OSError, ServerPropertiesError):
        _warn("[JAR] WARN: server-version unknown; skipping")
        return True
    jar = version_jar(version, ctx.jars_dir)
    if not jar.exists():
        _fail(f"[JAR] FAIL: {jar} not found")
        return False
    _pass(f"[JAR] PASS: {jar} size={jar.stat().st_size}")
    return True

def check_lock(ctx: LauncherContext = CTX) -> bool:
    holder = ServerLock(ctx.lock_file).holder()
    if holder is not None:
        _warn(f"[LOCK] WARN: {ctx.lock_file} exists (held by '{holder}'); launch will refuse")
    else:
        _pass(f"[LOCK] PASS: {ctx.lock_file} not present")
    return True

def check_java(ctx: LauncherContext = CTX) -> bool:
    path = shutil.which(ctx.java_cmd)
    if path is None:
        _fail(f"[JAVA] FAIL: '{ctx.java_cmd}' not found on PATH")
        return False
    _pass(f"[JAVA] PASS: {path}")
    return True

def check_webhook(ctx: LauncherContext = CTX, offline: bool = False) -> bool:
    if offline:
        _print("[WEBHOOK] skipped by --offline")
        return True
    try:
        url = read_webhook_url(ctx.webhook_file)
    except WebhookConfigError:
        _warn("[WEBHOOK] WARN: no webhook URL; skipping")
        return True
    try:
        content = {"content": f"preflight test {uuid.uuid4().hex[:8]}", "username": ctx.app_name}
        r = requests.post(url + "?wait=true", json=content, timeout=6)
        if not r.ok:
            _fail(f"[WEBHOOK] FAIL: POST {r.status_code}")
            return False
        msg_id = str(r.json().get("id", ""))
        _pass(f"[WEBHOOK] PASS: post ok (id={msg_id})")
        try:
            r2 = requests.delete(f"{url}/messages/{msg_id}", timeout=6)
            if r2.status_code in (200, 204):
                _print("[WEBHOOK] deleted ok")
        except requests.RequestException:
            pass
        return True
    except (requests.RequestException, ValueError) as e:
        _fail(f"[WEBHOOK] FAIL: {e}")
        return False

def main():

    parser = argparse.ArgumentParser(description="Preflight checks")
    parser.add_argument("--offline", action="store_true", help="Skip the webhook POST")
    args = parser.parse_args()

    total = 0
    passed = 0
    failed = 0

    def run_check(label, fn):
        nonlocal total, passed, failed
        total += 1
        try:
            ok = fn()
        except Exception as e:
            _fail(f"[{label}] FAIL: {e}")
            ok = False
        if ok:
            passed += 1
        else:
            failed += 1
        return ok

    run_check("LOG_DIR", check_logdir)
    run_check("WEBHOOK_FILE", check_webhook_file)
    run_check("PROPERTIES", check_properties)
    run_check("JAR", check_jar)
    run_check("LOCK", check_lock)
    run_check("JAVA", check_java)
    run_check("WEBHOOK", lambda: check_webhook(CTX, args.offline))

    _print("")
    summary = {
        "total": total,
        "passed": passed,
        "failed": failed,
        "offline": args.offline,
        "ts": datetime.now(timezone.utc).isoformat(),
        "log_dir": str(CTX.log_dir),
        "cwd": os.getcwd(),
    }
    try:
        CTX.log_dir.mkdir(parents=True, exist_ok=True)
        (CTX.log_dir / "preflight_summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
    except OSError:
        pass

    if failed == 0:
        _print(f"=== PREFLIGHT: PASS={passed}/{total} ===")
        sys.exit(0)
    else:
        _print(f"=== PREFLIGHT: FAILURES={failed}, PASS={passed}/{total} ===")
        sys.exit(1)

if __name__ == "__main__":
    main()
