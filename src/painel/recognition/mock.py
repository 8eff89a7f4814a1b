"""Mock recognition engine for testing.

Provides a controllable engine whose events are triggered by the test, plus
a factory that records every engine it creates and how many ran at once.
"""

from collections.abc import Sequence

from .engine import (
    EndCallback,
    ErrorCallback,
    RecognitionBusyError,
    RecognitionMode,
    RecognitionResult,
    RecognitionSettings,
    ResultsCallback,
)


class MockRecognitionEngine:
    """Mock recognition engine.

    Events are emitted synchronously through the bound callbacks, exactly as
    a real engine would deliver them on the event loop thread.
    """

    def __init__(
        self,
        mode: RecognitionMode = RecognitionMode.COMMAND,
        factory: "MockEngineFactory | None" = None,
    ) -> None:
        """Initialize mock engine.

        Args:
            mode: Mode the engine was created for
            factory: Owning factory, notified on start and stop
        """
        self._mode = mode
        self._factory = factory
        self._on_results: ResultsCallback | None = None
        self._on_end: EndCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._settings: RecognitionSettings | None = None
        self._results: list[RecognitionResult] = []
        self._active = False
        self._start_count = 0
        self._stop_count = 0
        self._busy_starts = 0

    def bind(
        self,
        on_results: ResultsCallback,
        on_end: EndCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Attach callbacks."""
        self._on_results = on_results
        self._on_end = on_end
        self._on_error = on_error

    def start(self, settings: RecognitionSettings) -> None:
        """Start the mock run, or raise if a busy start was scheduled."""
        self._start_count += 1
        if self._busy_starts > 0:
            self._busy_starts -= 1
            raise RecognitionBusyError("recognition already started")

        self._settings = settings
        self._results = []
        self._active = True
        if self._factory is not None:
            self._factory._engine_started()

    def stop(self) -> None:
        """Stop the mock run. Emits no terminal event, like an unconfirmed stop."""
        self._stop_count += 1
        if not self._active:
            return
        self._active = False
        if self._factory is not None:
            self._factory._engine_stopped()

    def fail_next_starts(self, count: int = 1) -> None:
        """Make the next ``count`` starts raise RecognitionBusyError."""
        self._busy_starts = count

    def emit_result(self, text: str, is_final: bool = True) -> None:
        """Emit a transcript as the engine would.

        Continuous runs accumulate results; single-shot runs replace them.
        """
        result = RecognitionResult(alternatives=[text], is_final=is_final)
        if self._settings is not None and self._settings.continuous:
            if self._results and not self._results[-1].is_final:
                self._results[-1] = result
            else:
                self._results.append(result)
        else:
            self._results = [result]
        self.emit_raw(list(self._results))

    def emit_raw(self, results: Sequence[RecognitionResult] | None) -> None:
        """Emit an arbitrary (possibly malformed) result set."""
        if self._on_results is not None:
            self._on_results(results)

    def emit_end(self) -> None:
        """Emit the end event."""
        self._mark_inactive()
        if self._on_end is not None:
            self._on_end()

    def emit_error(self, reason: str = "no-speech") -> None:
        """Emit an error event."""
        self._mark_inactive()
        if self._on_error is not None:
            self._on_error(reason)

    def _mark_inactive(self) -> None:
        if self._active:
            self._active = False
            if self._factory is not None:
                self._factory._engine_stopped()

    @property
    def mode(self) -> RecognitionMode:
        """Get the mode this engine was created for."""
        return self._mode

    @property
    def settings(self) -> RecognitionSettings | None:
        """Get the settings of the last successful start."""
        return self._settings

    @property
    def is_active(self) -> bool:
        """Return True while the mock run is active."""
        return self._active

    @property
    def start_count(self) -> int:
        """Get number of start calls."""
        return self._start_count

    @property
    def stop_count(self) -> int:
        """Get number of stop calls."""
        return self._stop_count


class MockEngineFactory:
    """Engine factory that creates and tracks mock engines."""

    def __init__(self) -> None:
        """Initialize the factory."""
        self._engines: list[MockRecognitionEngine] = []
        self._active = 0
        self._max_active = 0
        self._busy_starts = 0

    def __call__(self, mode: RecognitionMode) -> MockRecognitionEngine:
        """Create a new engine for a session."""
        engine = MockRecognitionEngine(mode=mode, factory=self)
        if self._busy_starts > 0:
            engine.fail_next_starts(self._busy_starts)
            self._busy_starts = 0
        self._engines.append(engine)
        return engine

    def fail_next_starts(self, count: int = 1) -> None:
        """Make the next created engine refuse ``count`` starts."""
        self._busy_starts = count

    def _engine_started(self) -> None:
        self._active += 1
        self._max_active = max(self._max_active, self._active)

    def _engine_stopped(self) -> None:
        self._active = max(0, self._active - 1)

    @property
    def engines(self) -> list[MockRecognitionEngine]:
        """Get every engine created so far."""
        return list(self._engines)

    @property
    def latest(self) -> MockRecognitionEngine:
        """Get the most recently created engine."""
        if not self._engines:
            raise IndexError("no engine created yet")
        return self._engines[-1]

    @property
    def active_count(self) -> int:
        """Get the number of engines currently running."""
        return self._active

    @property
    def max_active(self) -> int:
        """Get the highest number of engines that ran at the same time."""
        return self._max_active


__all__ = ["MockEngineFactory", "MockRecognitionEngine"]
