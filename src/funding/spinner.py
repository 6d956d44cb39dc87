"""Terminal progress spinner. Purely cosmetic; the engine never touches it."""
import itertools
import sys
import threading
from typing import TextIO

FRAMES = ("|", "/", "-", "\\")


class Spinner:
    def __init__(self, stream: TextIO | None = None, interval: float = 0.1, enabled: bool | None = None):
        self.stream = stream or sys.stdout
        self.interval = interval
        if enabled is None:
            enabled = self.stream.isatty()
        self.enabled = enabled
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _spin(self) -> None:
        for frame in itertools.cycle(FRAMES):
            if self._stop.wait(self.interval):
                break
            self.stream.write(f"\r{frame}")
            self.stream.flush()

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, name="spinner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None
        self.stream.write("\r")
        self.stream.flush()

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
