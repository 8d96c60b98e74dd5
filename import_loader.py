import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger("rowdesk.import")


class ImportState:
    def __init__(self, source: str = ""):
        self.source = source
        self.loaded = False
        self.failed = False
        self.error: Optional[Exception] = None
        self.rows: Optional[List[dict]] = None
        self._done = threading.Event()

    @property
    def finished(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class ImportLoader:
    """Runs a CSV read+parse off the caller's thread.

    The worker only fills in an ImportState; applying the result to the table
    happens wherever the state is polled. There is no cancel: once started the
    job runs to success or failure.
    """

    def __init__(self, loader_fn: Callable[[], List[dict]], source: str = ""):
        self.loader_fn = loader_fn
        self.state = ImportState(source)
        self._thread: Optional[threading.Thread] = None

    def start(self) -> ImportState:
        self._thread = threading.Thread(target=self._load, daemon=True)
        self._thread.start()
        return self.state

    def join(self, timeout: Optional[float] = None) -> bool:
        return self.state.wait(timeout)

    def _load(self):
        try:
            rows = self.loader_fn()
        except Exception as exc:
            logger.warning("Import of %s failed: %s", self.state.source or "CSV", exc)
            self.state.error = exc
            self.state.failed = True
        else:
            self.state.rows = rows
            self.state.loaded = True
        finally:
            self.state._done.set()
