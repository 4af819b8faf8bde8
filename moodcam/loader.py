"""
One-shot asynchronous model loading with a readiness flag.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
import logging
import threading

from moodcam.engine import DeepFaceEngine

logger = logging.getLogger(__name__)


class ModelLoader:
    """Loads every model bundle once, in parallel, on a background thread.

    `ready` flips false -> true exactly once. A failure is logged and leaves
    `ready` false for the rest of the session; there is no retry.
    """
    def __init__(self, engine: DeepFaceEngine):
        self.engine = engine
        self._ready = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def start(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.load, name="moodcam-loader", daemon=True)
        self._thread.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until loading finished (success or failure). Returns readiness."""
        self._done.wait(timeout)
        return self.ready

    def load(self):
        bundles = self.engine.bundles()
        logger.info(f"[loader] loading models: {', '.join(name for name, _, _ in bundles)}")
        try:
            with ThreadPoolExecutor(max_workers=len(bundles), thread_name_prefix="moodcam-model") as pool:
                futures = [pool.submit(self.engine.build_bundle, task, model) for _, task, model in bundles]
                for fut in futures:
                    fut.result()
        except Exception as e:
            self.error = e
            logger.exception("[loader] model loading failed; detection stays disabled")
        else:
            self._ready.set()
            logger.info("[loader] models loaded")
        finally:
            self._done.set()
