"""Dialogue controller: the voice interaction state machine.

Owns the dialogue state, the single recognition session handle and the
follow-up context. Recognition engines and the speech channel only post
messages; every state change happens in handle(), one message at a time.

Cycle:
    AMBIENT -> ACKNOWLEDGING -> CAPTURING_COMMAND -> CLASSIFYING -> EXECUTING -> AMBIENT

A topic request without a topic goes EXECUTING -> AWAITING_FOLLOW_UP ->
EXECUTING instead, and recognition failures during capture go through
RECOVERING.
"""

import asyncio
import logging
import time

from ..ai.classifier import IntentClassifier
from ..ai.errors import ClassifierError
from ..ai.intent import Intent, IntentAction
from ..config import DialogueConfig, PainelConfig
from ..logger.interaction import CycleOutcome, DialogueCycle
from ..logger.storage import JSONLWriter
from ..recognition.engine import EngineFactory, RecognitionError, RecognitionMode
from ..recognition.session import (
    RecognitionEnded,
    RecognitionFailed,
    RecognitionSession,
    UtteranceReceived,
)
from ..tts.channel import SpeechChannel, SpeechDone
from ..wake_word.detector import WakePhraseDetector
from .executor import ActionExecutor, run_blocking
from .state import (
    ControllerMessage,
    DialogueState,
    FollowUpContext,
    ResumeAmbient,
    RetryStart,
)

logger = logging.getLogger(__name__)


class DialogueController:
    """Coordinates recognition, synthesis, classification and execution."""

    def __init__(
        self,
        engine_factory: EngineFactory,
        channel: SpeechChannel,
        classifier: IntentClassifier,
        executor: ActionExecutor,
        detector: WakePhraseDetector | None = None,
        dialogue: DialogueConfig | None = None,
        language: str = "pt-BR",
        speech_rate: float = 1.0,
        classifier_timeout: float = 8.0,
        interaction_log: JSONLWriter | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            engine_factory: Creates one recognition engine per session
            channel: Speech output channel
            classifier: Command classifier (blocking, run in a thread)
            executor: Performs intent side effects
            detector: Wake phrase detector (default phrases if None)
            dialogue: Spoken phrases and retry timing
            language: Recognition language tag
            speech_rate: Rate for acknowledgements and apologies
            classifier_timeout: Seconds before classification is abandoned
            interaction_log: Optional JSONL cycle log
        """
        self._engine_factory = engine_factory
        self._channel = channel
        self._classifier = classifier
        self._executor = executor
        self._detector = detector or WakePhraseDetector()
        self._dialogue = dialogue or DialogueConfig()
        self._language = language
        self._speech_rate = speech_rate
        self._classifier_timeout = classifier_timeout
        self._interaction_log = interaction_log

        self._queue: asyncio.Queue[ControllerMessage | None] = asyncio.Queue()
        self._state = DialogueState.AMBIENT
        self._epoch = 0
        self._session: RecognitionSession | None = None
        self._next_session_id = 0
        self._start_attempts = 0
        self._speech_token: int | None = None
        self._follow_up = FollowUpContext()
        self._cycle: DialogueCycle | None = None
        self._cycle_started = 0.0
        self._started = False
        self._running = False

    @classmethod
    def from_config(
        cls,
        config: PainelConfig,
        engine_factory: EngineFactory,
        channel: SpeechChannel,
        classifier: IntentClassifier,
        executor: ActionExecutor,
        interaction_log: JSONLWriter | None = None,
    ) -> "DialogueController":
        """Create a controller from configuration."""
        return cls(
            engine_factory,
            channel,
            classifier,
            executor,
            detector=WakePhraseDetector.from_config(config.wake_word),
            dialogue=config.dialogue,
            language=config.recognition.language,
            speech_rate=config.tts.rate,
            classifier_timeout=config.llm.timeout_seconds,
            interaction_log=interaction_log,
        )

    # -- Public API ---------------------------------------------------------

    @property
    def state(self) -> DialogueState:
        """Get the current dialogue state."""
        return self._state

    @property
    def follow_up(self) -> FollowUpContext:
        """Get the follow-up context."""
        return self._follow_up

    @property
    def session(self) -> RecognitionSession | None:
        """Get the current recognition session handle."""
        return self._session

    @property
    def speech_token(self) -> int | None:
        """Get the token of the utterance the controller is waiting on."""
        return self._speech_token

    def post(self, message: ControllerMessage) -> None:
        """Queue a message. Must be called on the event loop thread."""
        self._queue.put_nowait(message)

    def start(self) -> None:
        """Enter AMBIENT and start listening. Requires a running loop."""
        if self._started:
            return
        self._started = True
        self._channel.set_done_callback(self.post)
        logger.info("Dialogue controller started")
        self._enter_ambient()

    async def run(self) -> None:
        """Process messages until stop() is called."""
        self.start()
        self._running = True
        while self._running:
            message = await self._queue.get()
            if message is None:
                break
            await self.handle(message)
        logger.info("Dialogue controller stopped")

    def stop(self) -> None:
        """Stop listening and speaking and end run()."""
        self._running = False
        self._epoch += 1
        self._stop_session()
        self._speech_token = None
        self._channel.cancel()
        self._queue.put_nowait(None)

    async def process_pending(self) -> int:
        """Handle every queued message without blocking.

        Returns:
            Number of messages handled
        """
        handled = 0
        while not self._queue.empty():
            message = self._queue.get_nowait()
            if message is None:
                continue
            await self.handle(message)
            handled += 1
        return handled

    async def handle(self, message: ControllerMessage) -> None:
        """Apply one message to the state machine."""
        if isinstance(message, UtteranceReceived):
            if self._is_current(message.session_id, message):
                await self._on_utterance(message)
        elif isinstance(message, RecognitionEnded):
            if self._is_current(message.session_id, message):
                self._on_recognition_ended()
        elif isinstance(message, RecognitionFailed):
            if self._is_current(message.session_id, message):
                self._on_recognition_failed(message.reason)
        elif isinstance(message, SpeechDone):
            self._on_speech_done(message)
        elif isinstance(message, RetryStart):
            self._on_retry_start(message)
        elif isinstance(message, ResumeAmbient):
            self._on_resume_ambient(message)
        else:
            logger.warning("Ignoring unknown message: %r", message)

    # -- Message handlers ---------------------------------------------------

    def _is_current(self, session_id: int, message: object) -> bool:
        if self._session is None or self._session.session_id != session_id:
            logger.debug("Discarding stale event %r", message)
            return False
        return True

    async def _on_utterance(self, message: UtteranceReceived) -> None:
        utterance = message.utterance

        if self._state is DialogueState.AMBIENT:
            if self._detector.matches(utterance.text):
                logger.info("Wake phrase detected: '%s'", utterance.text)
                self._enter_acknowledging()
            return

        if not utterance.is_final:
            return

        logger.info("Command: '%s'", utterance.text)
        self._stop_session()
        if self._cycle is not None:
            self._cycle.transcript = utterance.text

        if self._state is DialogueState.AWAITING_FOLLOW_UP and self._follow_up.pending:
            # The reply to the topic question is the topic itself
            self._follow_up.clear()
            await self._execute(Intent(IntentAction.INITIATE_FOLLOW_TOPIC, text=utterance.text))
            return

        self._transition(DialogueState.CLASSIFYING)
        epoch = self._epoch
        intent = await self._classify(utterance.text)
        if self._epoch != epoch:
            logger.info("Controller stopped during classification, dropping intent")
            return
        await self._execute(intent)

    def _on_recognition_ended(self) -> None:
        if self._state is DialogueState.AMBIENT:
            logger.debug("Ambient session ended, re-arming")
            self._stop_session()
            self._schedule_resume_ambient()
        else:
            logger.info("Command capture ended without a final utterance")
            self._enter_recovering(CycleOutcome.RECOGNITION_FAILED, "no final utterance")

    def _on_recognition_failed(self, reason: str) -> None:
        if self._state is DialogueState.AMBIENT:
            logger.warning("Ambient recognition failed (%s), re-arming", reason)
            self._stop_session()
            self._schedule_resume_ambient()
        else:
            logger.warning("Command recognition failed: %s", reason)
            self._enter_recovering(CycleOutcome.RECOGNITION_FAILED, reason)

    def _on_speech_done(self, message: SpeechDone) -> None:
        if self._speech_token is None or message.token != self._speech_token:
            logger.debug("Discarding stale speech completion %d", message.token)
            return
        self._speech_token = None

        if self._state is DialogueState.ACKNOWLEDGING:
            self._enter_listening(DialogueState.CAPTURING_COMMAND)
        elif self._state is DialogueState.EXECUTING and self._follow_up.pending:
            self._finish_cycle()
            self._begin_cycle(follow_up=True)
            self._enter_listening(DialogueState.AWAITING_FOLLOW_UP)
        elif self._state in (DialogueState.EXECUTING, DialogueState.RECOVERING):
            self._enter_ambient()
        else:
            logger.debug("Speech done in %s, nothing to do", self._state.name)

    def _on_retry_start(self, message: RetryStart) -> None:
        session = self._session
        if session is None or session.session_id != message.session_id or session.is_active:
            logger.debug("Discarding stale start retry for session %d", message.session_id)
            return
        self._try_start(session)

    def _on_resume_ambient(self, message: ResumeAmbient) -> None:
        if message.epoch != self._epoch or self._state is not DialogueState.AMBIENT:
            logger.debug("Discarding stale ambient resume")
            return
        self._enter_ambient()

    # -- Transitions --------------------------------------------------------

    def _transition(self, new_state: DialogueState) -> None:
        old_state = self._state
        self._state = new_state
        self._epoch += 1
        logger.info("State: %s -> %s", old_state.name, new_state.name)

    def _enter_ambient(self) -> None:
        self._finish_cycle()
        self._follow_up.clear()
        if self._state is not DialogueState.AMBIENT:
            self._transition(DialogueState.AMBIENT)
        else:
            self._epoch += 1
        self._start_session(RecognitionMode.AMBIENT)

    def _enter_acknowledging(self) -> None:
        self._stop_session()
        self._transition(DialogueState.ACKNOWLEDGING)
        self._begin_cycle(follow_up=False)
        self._speak(self._dialogue.acknowledgement, self._speech_rate)

    def _enter_listening(self, state: DialogueState) -> None:
        self._transition(state)
        self._start_session(RecognitionMode.COMMAND)

    def _enter_recovering(self, outcome: CycleOutcome, error: str) -> None:
        self._stop_session()
        self._follow_up.clear()
        self._transition(DialogueState.RECOVERING)
        if self._cycle is not None:
            self._cycle.outcome = outcome
            self._cycle.error = error
            self._cycle.response = self._dialogue.apology
        self._speak(self._dialogue.apology, self._speech_rate)

    async def _classify(self, transcript: str) -> Intent:
        start = time.monotonic()
        try:
            intent = await run_blocking(
                self._classifier.classify, transcript, timeout=self._classifier_timeout
            )
        except asyncio.TimeoutError:
            return self._classifier_failed(f"timed out after {self._classifier_timeout}s")
        except ClassifierError as e:
            return self._classifier_failed(str(e))
        except Exception as e:
            logger.exception("Unexpected classifier failure")
            return self._classifier_failed(str(e))
        finally:
            self._record_latency("classify", start)

        if self._cycle is not None:
            self._cycle.intent = intent.action.name
            self._cycle.intent_text = intent.text
        return intent

    def _classifier_failed(self, error: str) -> Intent:
        logger.warning("Classification failed: %s", error)
        if self._cycle is not None:
            self._cycle.outcome = CycleOutcome.CLASSIFIER_FAILED
            self._cycle.error = error
        return Intent.apology(self._dialogue.classifier_apology)

    async def _execute(self, intent: Intent) -> None:
        self._transition(DialogueState.EXECUTING)
        epoch = self._epoch
        start = time.monotonic()
        outcome = await self._executor.execute(intent)
        self._record_latency("execute", start)
        if self._epoch != epoch:
            logger.info("Controller stopped during execution, not speaking")
            return

        if outcome.awaits_follow_up:
            self._follow_up.arm()

        if self._cycle is not None:
            if self._cycle.intent is None:
                self._cycle.intent = intent.action.name
                self._cycle.intent_text = intent.text
            if self._cycle.outcome is CycleOutcome.COMPLETED:
                self._cycle.outcome = outcome.outcome
            self._cycle.error = self._cycle.error or outcome.error
            self._cycle.response = outcome.response

        self._speak(outcome.response, outcome.rate)

    # -- Resources ----------------------------------------------------------

    def _speak(self, text: str, rate: float) -> None:
        if self._session is not None:
            self._stop_session()
        self._speech_token = self._channel.speak(text, rate)

    def _start_session(self, mode: RecognitionMode) -> None:
        self._stop_session()
        self._next_session_id += 1
        self._start_attempts = 0

        try:
            engine = self._engine_factory(mode)
        except RecognitionError as e:
            logger.warning("Could not create %s recognition engine: %s", mode.value, e)
            self._session = None
            self._start_exhausted(mode, str(e))
            return

        self._session = RecognitionSession(
            self._next_session_id,
            mode,
            engine,
            sink=self.post,
            language=self._language,
        )
        self._try_start(self._session)

    def _try_start(self, session: RecognitionSession) -> None:
        if session.start():
            return

        self._start_attempts += 1
        if self._start_attempts < self._dialogue.start_retry_attempts:
            delay = self._dialogue.start_retry_delay_ms / 1000
            logger.info(
                "Retrying session %d start in %.2fs (attempt %d/%d)",
                session.session_id,
                delay,
                self._start_attempts + 1,
                self._dialogue.start_retry_attempts,
            )
            asyncio.get_running_loop().call_later(
                delay, self.post, RetryStart(session.session_id)
            )
            return

        self._session = None
        self._start_exhausted(session.mode, "engine busy")

    def _start_exhausted(self, mode: RecognitionMode, reason: str) -> None:
        if mode is RecognitionMode.AMBIENT:
            logger.warning("Ambient listening unavailable (%s), re-arming later", reason)
            self._schedule_resume_ambient()
        else:
            self._enter_recovering(CycleOutcome.RECOGNITION_FAILED, reason)

    def _stop_session(self) -> None:
        if self._session is not None:
            self._session.stop()
            self._session = None

    def _schedule_resume_ambient(self) -> None:
        delay = self._dialogue.ambient_restart_delay_ms / 1000
        asyncio.get_running_loop().call_later(delay, self.post, ResumeAmbient(self._epoch))

    # -- Interaction log ----------------------------------------------------

    def _begin_cycle(self, follow_up: bool) -> None:
        self._cycle = DialogueCycle(follow_up=follow_up)
        self._cycle_started = time.monotonic()

    def _record_latency(self, step: str, start: float) -> None:
        if self._cycle is not None:
            self._cycle.latency_ms[step] = int((time.monotonic() - start) * 1000)

    def _finish_cycle(self) -> None:
        cycle = self._cycle
        if cycle is None:
            return
        self._cycle = None
        cycle.latency_ms["total"] = int((time.monotonic() - self._cycle_started) * 1000)
        logger.debug("Cycle finished: %s", cycle.outcome.value)
        if self._interaction_log is not None:
            self._interaction_log.write(cycle)


__all__ = ["DialogueController"]
