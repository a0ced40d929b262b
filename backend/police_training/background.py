# Overview: Detached side effects (mail delivery) that run outside the response path.

"""
Background task runner.

Side effects such as sending an activation email must not delay or break
the request that triggered them. Tasks run on a bounded thread pool inside
their own application context; any exception is logged and contained.
Outstanding futures are tracked so an orderly shutdown can wait for them.

Each application gets its own pool, stored in app.extensions["background"];
the module-level BackgroundTasks object resolves it through current_app.
"""

from __future__ import annotations

import atexit
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures

from flask import Flask, current_app


class _AppTasks:
    """Thread pool and pending futures for one application."""

    def __init__(self, app: Flask):
        self.app = app
        self.executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=app.config.get("BACKGROUND_MAX_WORKERS", 4),
            thread_name_prefix="background",
        )
        self.pending: set[Future] = set()
        self.lock = threading.Lock()

    def submit(self, fn, args, kwargs, task_name: str) -> Future:
        if self.executor is None:
            raise RuntimeError("background tasks already shut down")

        app = self.app

        def _task():
            with app.app_context():
                try:
                    fn(*args, **kwargs)
                except Exception:
                    app.logger.exception("Background task %s failed", task_name)

        future = self.executor.submit(_task)
        with self.lock:
            self.pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self.lock:
            self.pending.discard(future)

    def wait(self, timeout: float | None = None) -> None:
        with self.lock:
            pending = list(self.pending)
        if pending:
            wait_futures(pending, timeout=timeout)

    def shutdown(self) -> None:
        if self.executor is not None:
            self.wait()
            self.executor.shutdown(wait=True)
            self.executor = None


class BackgroundTasks:
    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        if "background" in app.extensions:
            return
        tasks = _AppTasks(app)
        app.extensions["background"] = tasks
        atexit.register(tasks.shutdown)

    @staticmethod
    def _tasks(app: Flask | None = None) -> _AppTasks:
        if app is None:
            app = current_app
        try:
            return app.extensions["background"]
        except KeyError:
            raise RuntimeError("BackgroundTasks.init_app() was not called for this app") from None

    def run(self, fn, *args, name: str | None = None, **kwargs) -> Future:
        """Schedule fn(*args, **kwargs); failures are logged, never raised to the caller."""
        task_name = name or getattr(fn, "__name__", "task")
        return self._tasks().submit(fn, args, kwargs, task_name)

    def wait(self, timeout: float | None = None) -> None:
        """Block until every task scheduled so far on the current app has finished."""
        self._tasks().wait(timeout)

    @property
    def outstanding(self) -> int:
        tasks = self._tasks()
        with tasks.lock:
            return len(tasks.pending)

    def shutdown(self, app: Flask | None = None) -> None:
        self._tasks(app).shutdown()
