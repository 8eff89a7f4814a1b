"""Console recognition engine for development without a microphone.

Each line typed on stdin is delivered as a final recognition result to the
engine that is currently running. A single reader thread serves every
engine instance.
"""

import asyncio
import logging
import sys
import threading

from .engine import (
    EndCallback,
    ErrorCallback,
    RecognitionBusyError,
    RecognitionError,
    RecognitionResult,
    RecognitionSettings,
    ResultsCallback,
)

logger = logging.getLogger(__name__)


class _ConsoleInput:
    """Shared stdin reader that dispatches lines to the listening engine."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listener: "ConsoleRecognitionEngine | None" = None
        self._thread: threading.Thread | None = None

    def attach(self, engine: "ConsoleRecognitionEngine") -> None:
        with self._lock:
            if self._listener is not None and self._listener is not engine:
                raise RecognitionBusyError("console input already attached to another run")
            self._listener = engine
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._read_lines, name="console-recognition", daemon=True
                )
                self._thread.start()

    def detach(self, engine: "ConsoleRecognitionEngine") -> None:
        with self._lock:
            if self._listener is engine:
                self._listener = None

    def _read_lines(self) -> None:
        for line in sys.stdin:
            text = line.strip()
            if not text:
                continue
            with self._lock:
                listener = self._listener
            if listener is None:
                logger.debug("Console input ignored, nothing is listening: %r", text)
                continue
            listener._deliver(text)


_console_input = _ConsoleInput()


class ConsoleRecognitionEngine:
    """Recognition engine fed by typed lines."""

    def __init__(self) -> None:
        """Initialize the engine."""
        self._on_results: ResultsCallback | None = None
        self._on_end: EndCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._settings: RecognitionSettings | None = None
        self._results: list[RecognitionResult] = []
        self._running = False

    def bind(
        self,
        on_results: ResultsCallback,
        on_end: EndCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Attach event callbacks."""
        self._on_results = on_results
        self._on_end = on_end
        self._on_error = on_error

    def start(self, settings: RecognitionSettings) -> None:
        """Start listening for typed lines.

        Raises:
            RecognitionBusyError: If another console run is still attached
        """
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise RecognitionError("engine must be started from the event loop") from e

        _console_input.attach(self)
        self._settings = settings
        self._results = []
        self._running = True
        prompt = "ambient" if settings.continuous else "command"
        print(f"[{prompt}] > ", end="", flush=True)

    def stop(self) -> None:
        """Detach from the console and report the end of the run."""
        if not self._running:
            return
        self._running = False
        _console_input.detach(self)
        if self._loop is not None and self._on_end is not None:
            self._loop.call_soon(self._on_end)

    def _deliver(self, text: str) -> None:
        """Called from the reader thread with one typed line."""
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._handle_line, text)

    def _handle_line(self, text: str) -> None:
        if not self._running or self._settings is None:
            return

        self._results.append(RecognitionResult(alternatives=[text], is_final=True))
        if self._on_results is not None:
            self._on_results(list(self._results))

        if not self._settings.continuous and self._running:
            self._running = False
            _console_input.detach(self)
            if self._on_end is not None:
                self._on_end()


__all__ = ["ConsoleRecognitionEngine"]
