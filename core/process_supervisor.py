# core/process_supervisor.py
"""
Server process supervision.

- ServerProcess owns the child (java -jar server.jar) and a writable stdin.
- ShutdownSupervisor polls liveness and the clock once per interval, sends
  one-shot reminders into the server console, then runs the stop sequence
  (announce, save-all, stop, wait) when the scheduled time arrives.
- Single thread; the only blocking points are the sleeps and the final wait.
"""
from __future__ import annotations
import json
import logging
import signal
import subprocess
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from core.errors import ServerSpawnError
from core.reminders import ReminderSchedule
from core.schedule import format_schedule
from core.server_lock import ServerLock

log = logging.getLogger(__name__)

TIMES_UP_MESSAGE = "Time's Up!"
REMINDER_COLOR = "#FBA800"


def build_server_command(java: str = "java", xmx: str = "2048M", xms: str = "1024M",
                         jar: str = "server.jar") -> List[str]:
    return [java, f"-Xmx{xmx}", f"-Xms{xms}", "-jar", str(jar)]


def tellraw(message: str, scheduled_at: datetime) -> str:
    """Console command broadcasting `message` with the shutdown time as hover text."""
    component = {
        "text": message,
        "color": REMINDER_COLOR,
        "hoverEvent": {
            "action": "show_text",
            "contents": {"text": f"Scheduled shutdown time: {format_schedule(scheduled_at)}"},
        },
    }
    return "tellraw @a " + json.dumps(component)


@contextmanager
def sigint_ignored():
    """Ctrl-C cannot cut the stop sequence short (main thread only)."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    if previous is None:
        previous = signal.SIG_DFL
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class ServerProcess:
    def __init__(self, command: List[str], cwd: Optional[str] = None):
        self.command = command
        self.cwd = cwd
        self.proc: Optional[subprocess.Popen] = None
        self.returncode: Optional[int] = None

    @property
    def pid(self) -> Optional[int]:
        return self.proc.pid if self.proc is not None else None

    def start(self) -> None:
        try:
            self.proc = subprocess.Popen(
                self.command,
                cwd=self.cwd,
                stdin=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise ServerSpawnError(f"Failed to start {' '.join(self.command)}: {e}") from e
        log.info(f"[SERVER] Started (pid={self.proc.pid}): {' '.join(self.command)}")

    def send(self, line: str) -> bool:
        """Write one console line; a closed pipe is reported as False, never raised."""
        if self.proc is None or self.proc.stdin is None:
            return False
        try:
            self.proc.stdin.write(line + "\n")
            self.proc.stdin.flush()
            return True
        except (BrokenPipeError, OSError, ValueError):
            # the server may have exited since the last poll
            return False

    def say(self, message: str, scheduled_at: datetime) -> bool:
        return self.send(tellraw(message, scheduled_at))

    def poll(self) -> Optional[int]:
        if self.proc is None:
            return self.returncode
        code = self.proc.poll()
        if code is not None:
            self._exited(code)
        return code

    def wait(self) -> Optional[int]:
        if self.proc is None:
            return self.returncode
        code = self.proc.wait()
        self._exited(code)
        return code

    def _exited(self, code: int) -> None:
        self.returncode = code
        if self.proc is not None and self.proc.stdin is not None:
            try:
                self.proc.stdin.close()
            except (BrokenPipeError, OSError):
                pass
        self.proc = None


class ShutdownSupervisor:
    def __init__(
        self,
        process: ServerProcess,
        scheduled_at: datetime,
        lock: ServerLock,
        on_shutdown: Callable[[], object],
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = 1.0,
        grace_period: float = 5.0,
        reminders: Optional[ReminderSchedule] = None,
    ):
        self.process = process
        self.scheduled_at = scheduled_at
        self.lock = lock
        self.on_shutdown = on_shutdown
        self.clock = clock
        self.sleep = sleep
        self.poll_interval = poll_interval
        self.grace_period = grace_period
        self.reminders = reminders or ReminderSchedule()
        self.state = "idle"

    def run(self) -> Optional[int]:
        """Supervise until the server exits; returns its exit code."""
        self.state = "running"
        times_up = False
        try:
            while True:
                code = self.process.poll()
                if code is not None:
                    log.info(f"[SERVER] Server process has already exited! (code={code})")
                    break

                remaining = self.scheduled_at - self.clock()
                if remaining <= timedelta(0):
                    times_up = True
                    break

                reminder = self.reminders.due(remaining)
                if reminder is not None:
                    self.state = f"reminder:{reminder.minutes}"
                    log.info(f"[SERVER] {reminder.message}")
                    self.process.say(reminder.message, self.scheduled_at)

                self.sleep(self.poll_interval)
        except KeyboardInterrupt:
            log.warning("[SERVER] Ctrl-C received. Stopping server.")
            self.state = "stopping"
            self.process.send("save-all")
            self.process.send("stop")
            code = self._wait()
        if times_up:
            with sigint_ignored():
                code = self._stop_sequence()
        self._finish()
        return code

    def _stop_sequence(self) -> Optional[int]:
        self.state = "stopping"
        log.info(f"[SERVER] {TIMES_UP_MESSAGE}")
        self.process.say(TIMES_UP_MESSAGE, self.scheduled_at)
        self.sleep(self.grace_period)
        self.process.send("save-all")
        self.sleep(self.grace_period)
        self.process.send("stop")
        return self._wait()

    def _wait(self) -> Optional[int]:
        try:
            code = self.process.wait()
        except OSError as e:
            log.warning(f"[SERVER] Error attempting to wait for server process to exit: {e}")
            return None
        log.info(f"[SERVER] Server process exited (code={code})")
        return code

    def _finish(self) -> None:
        self.state = "exited"
        self.lock.release()
        self.on_shutdown()
