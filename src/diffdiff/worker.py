"""
Job Dispatcher

Runs the expensive Diff-Diff commands on one long-lived background thread.

Callers post (token, command, params) onto an ordered queue and block until
the worker hands the token back. The worker executes commands one at a time,
each to completion, so concurrent callers never interleave.

There is no cancellation, timeout or failure message: if a command raises,
the error is logged and its caller keeps waiting.

Usage:
    dispatcher = JobDispatcher({COMPUTE_DIFF_DIFF: compute_diff_diff})
    dispatcher.start()
    dispatcher.dispatch(COMPUTE_DIFF_DIFF, musics, context)
    dispatcher.stop()
"""

import itertools
import queue
import threading

from src.utils import setup_logging, validate_command

# --- Module Logger ---
logger = setup_logging(__name__)

_STOP = object()


class JobDispatcher:
    """
    Args:
        handlers: dict of command name -> callable(*params)
    """

    def __init__(self, handlers):
        for command in handlers:
            validate_command(command)
        self.handlers = dict(handlers)

        self._requests = queue.Queue()
        self._tokens = itertools.count(1)
        self._pending = {}
        self._pending_lock = threading.Lock()
        self._thread = None

    # --- Lifecycle ---
    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="diffdiff-worker", daemon=True)
        self._thread.start()
        logger.info("Worker started")

    def stop(self):
        """Let the worker finish everything queued so far, then exit."""
        if not self.running:
            return
        self._requests.put(_STOP)
        self._thread.join()
        self._thread = None
        logger.info("Worker stopped")

    def in_worker(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    # --- Initiator side ---
    def dispatch(self, command, *params):
        """
        Run `command` on the worker and block until it completes.

        Runs inline instead when no worker is running or when called from the
        worker itself.

        Raises:
            ValueError: If the command has no registered handler
        """
        validate_command(command)
        if command not in self.handlers:
            raise ValueError(f"No handler registered for command '{command}'")

        if not self.running or self.in_worker():
            self.handlers[command](*params)
            return

        token = next(self._tokens)
        done = threading.Event()
        with self._pending_lock:
            self._pending[token] = done

        self._requests.put((token, command, params))
        done.wait()

    def pending_tokens(self):
        with self._pending_lock:
            return sorted(self._pending)

    def _on_message(self, token):
        with self._pending_lock:
            done = self._pending.pop(token, None)
        if done is not None:
            done.set()

    # --- Worker side ---
    def _run(self):
        while True:
            message = self._requests.get()
            if message is _STOP:
                break

            token, command, params = message
            logger.info(f"Worker running {command} (token {token})")
            try:
                self.handlers[command](*params)
            except Exception:
                logger.exception(f"Worker command {command} failed (token {token}), caller left pending")
                continue
            self._on_message(token)
