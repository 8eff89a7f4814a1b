"""Unit tests for the dialogue controller state machine."""

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pytest

from painel.ai import (
    ClassifierAPIError,
    Intent,
    IntentAction,
    MockContentService,
    MockIntentClassifier,
)
from painel.config import DialogueConfig, PainelConfig
from painel.dialogue import ActionExecutor, DialogueController, DialogueState, ResumeAmbient
from painel.logger import CycleOutcome, JSONLWriter
from painel.recognition import MockEngineFactory, RecognitionError, RecognitionMode
from painel.reminders import InMemoryReminderStore, ReminderKind
from painel.tts import MockSynthesisChannel, SpeechDone

WAKE = "olá smart home"


class SlowClassifier:
    """Classifier that blocks longer than the controller waits."""

    def classify(self, transcript: str) -> Intent:
        time.sleep(0.3)
        return Intent(IntentAction.CHAT, spoken_response="tarde demais")


@dataclass
class Harness:
    controller: DialogueController
    factory: MockEngineFactory
    channel: MockSynthesisChannel
    classifier: MockIntentClassifier
    store: InMemoryReminderStore
    content: MockContentService
    dialogue: DialogueConfig

    async def pump(self, rounds: int = 3) -> None:
        """Let timers fire and handle everything they posted."""
        for _ in range(rounds):
            await asyncio.sleep(0.01)
            await self.controller.process_pending()

    async def hear(self, text: str, is_final: bool = True) -> None:
        self.factory.latest.emit_result(text, is_final=is_final)
        await self.controller.process_pending()

    async def finish_speech(self) -> None:
        self.channel.complete()
        await self.controller.process_pending()

    async def wake(self) -> None:
        await self.hear(WAKE, is_final=False)
        await self.finish_speech()


def make_harness(
    classifier: object | None = None,
    interaction_log: JSONLWriter | None = None,
    classifier_timeout: float = 2.0,
) -> Harness:
    factory = MockEngineFactory()
    channel = MockSynthesisChannel()
    mock_classifier = MockIntentClassifier()
    store = InMemoryReminderStore()
    content = MockContentService()
    dialogue = DialogueConfig(start_retry_delay_ms=0, ambient_restart_delay_ms=0)
    controller = DialogueController(
        factory,
        channel,
        classifier or mock_classifier,  # type: ignore[arg-type]
        ActionExecutor(store, content, narration_rate=1.2),
        dialogue=dialogue,
        classifier_timeout=classifier_timeout,
        interaction_log=interaction_log,
    )
    return Harness(controller, factory, channel, mock_classifier, store, content, dialogue)


@pytest.fixture
def h() -> Harness:
    return make_harness()


class TestAmbient:
    """Tests for ambient listening and wake detection."""

    @pytest.mark.asyncio
    async def test_start_opens_ambient_session(self, h: Harness) -> None:
        h.controller.start()

        assert h.controller.state is DialogueState.AMBIENT
        assert h.controller.session is not None
        assert h.controller.session.mode is RecognitionMode.AMBIENT
        assert h.factory.latest.settings is not None
        assert h.factory.latest.settings.continuous is True
        assert h.factory.active_count == 1

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, h: Harness) -> None:
        h.controller.start()
        h.controller.start()
        assert len(h.factory.engines) == 1

    @pytest.mark.asyncio
    async def test_other_speech_is_ignored(self, h: Harness) -> None:
        h.controller.start()
        await h.hear("vamos jantar fora hoje")

        assert h.controller.state is DialogueState.AMBIENT
        assert h.channel.spoken == []

    @pytest.mark.asyncio
    async def test_wake_phrase_acknowledges(self, h: Harness) -> None:
        h.controller.start()
        await h.hear("então olá smart", is_final=False)
        await h.hear("então olá smart home", is_final=False)

        assert h.controller.state is DialogueState.ACKNOWLEDGING
        assert h.controller.session is None
        assert h.factory.active_count == 0
        assert h.channel.spoken_texts == ["Sim? Estou ouvindo."]

    @pytest.mark.asyncio
    async def test_punctuated_wake_phrase_acknowledges(self, h: Harness) -> None:
        h.controller.start()
        await h.hear("Olá, Smart Home.", is_final=False)

        assert h.controller.state is DialogueState.ACKNOWLEDGING

    @pytest.mark.asyncio
    async def test_acknowledgement_done_starts_command_capture(self, h: Harness) -> None:
        h.controller.start()
        await h.wake()

        assert h.controller.state is DialogueState.CAPTURING_COMMAND
        assert h.controller.session is not None
        assert h.controller.session.mode is RecognitionMode.COMMAND
        assert h.factory.latest.settings.continuous is False
        assert h.factory.max_active == 1

    @pytest.mark.asyncio
    async def test_ambient_error_rearms_without_speaking(self, h: Harness) -> None:
        h.controller.start()
        h.factory.latest.emit_error("network")
        await h.controller.process_pending()

        assert h.controller.session is None
        await h.pump()

        assert h.controller.state is DialogueState.AMBIENT
        assert len(h.factory.engines) == 2
        assert h.factory.active_count == 1
        assert h.channel.spoken == []

    @pytest.mark.asyncio
    async def test_ambient_end_rearms(self, h: Harness) -> None:
        h.controller.start()
        h.factory.latest.emit_end()
        await h.pump()

        assert h.controller.session is not None
        assert h.controller.session.session_id == 2

    @pytest.mark.asyncio
    async def test_stale_resume_is_ignored(self, h: Harness) -> None:
        h.controller.start()
        await h.controller.handle(ResumeAmbient(epoch=-1))
        assert len(h.factory.engines) == 1

    @pytest.mark.asyncio
    async def test_engine_creation_failure_keeps_ambient(self) -> None:
        def broken_factory(mode: RecognitionMode) -> None:
            raise RecognitionError("no microphone")

        controller = DialogueController(
            broken_factory,  # type: ignore[arg-type]
            MockSynthesisChannel(),
            MockIntentClassifier(),
            ActionExecutor(InMemoryReminderStore(), MockContentService()),
            dialogue=DialogueConfig(ambient_restart_delay_ms=1000),
        )
        controller.start()

        assert controller.state is DialogueState.AMBIENT
        assert controller.session is None


class TestCommandCycle:
    """Tests for capture, classification and execution."""

    @pytest.mark.asyncio
    async def test_reminder_cycle(self, h: Harness) -> None:
        h.classifier.when(
            "lembrar de comprar pão",
            Intent(IntentAction.ADD_REMINDER, text="comprar pão", reminder_kind=ReminderKind.TASK),
        )
        h.controller.start()
        await h.wake()
        await h.hear("lembrar de comprar pão")

        assert h.controller.state is DialogueState.EXECUTING
        assert h.controller.session is None
        assert h.channel.last_text == "Adicionado: comprar pão"
        assert [r.text for r in h.store.reminders] == ["comprar pão"]

        await h.finish_speech()

        assert h.controller.state is DialogueState.AMBIENT
        assert h.controller.session.mode is RecognitionMode.AMBIENT

    @pytest.mark.asyncio
    async def test_interim_command_result_is_ignored(self, h: Harness) -> None:
        h.controller.start()
        await h.wake()
        await h.hear("lembrar de", is_final=False)

        assert h.controller.state is DialogueState.CAPTURING_COMMAND
        assert h.classifier.call_count == 0

    @pytest.mark.asyncio
    async def test_chat_response_is_spoken(self, h: Harness) -> None:
        h.controller.start()
        await h.wake()
        await h.hear("que horas são")

        assert h.classifier.transcripts == ["que horas são"]
        assert h.channel.last_text == "Você disse: que horas são"

    @pytest.mark.asyncio
    async def test_classifier_error_apologizes(self, h: Harness) -> None:
        h.classifier.enqueue(ClassifierAPIError("overloaded", status_code=529))
        h.controller.start()
        await h.wake()
        await h.hear("bom dia")

        assert h.controller.state is DialogueState.EXECUTING
        assert h.channel.last_text == h.dialogue.classifier_apology

        await h.finish_speech()
        assert h.controller.state is DialogueState.AMBIENT

    @pytest.mark.asyncio
    async def test_classifier_timeout_apologizes(self) -> None:
        h = make_harness(classifier=SlowClassifier(), classifier_timeout=0.01)
        h.controller.start()
        await h.wake()
        await h.hear("bom dia")

        assert h.channel.last_text == h.dialogue.classifier_apology

    @pytest.mark.asyncio
    async def test_reminder_failure_apologizes_then_resumes(self, h: Harness) -> None:
        h.classifier.enqueue(Intent(IntentAction.ADD_REMINDER, text="x"))
        h.store.fail_next()
        h.controller.start()
        await h.wake()
        await h.hear("lembrar x")

        assert h.channel.last_text == h.dialogue.reminder_apology
        await h.finish_speech()
        assert h.controller.state is DialogueState.AMBIENT


class TestRecovery:
    """Tests for recognition failures during command capture."""

    @pytest.mark.asyncio
    async def test_capture_error_recovers(self, h: Harness) -> None:
        h.controller.start()
        await h.wake()
        h.factory.latest.emit_error("no-speech")
        await h.controller.process_pending()

        assert h.controller.state is DialogueState.RECOVERING
        assert h.controller.session is None
        assert h.channel.last_text == h.dialogue.apology

        await h.finish_speech()
        assert h.controller.state is DialogueState.AMBIENT
        assert h.controller.session is not None

    @pytest.mark.asyncio
    async def test_capture_end_without_utterance_recovers(self, h: Harness) -> None:
        h.controller.start()
        await h.wake()
        h.factory.latest.emit_end()
        await h.controller.process_pending()

        assert h.controller.state is DialogueState.RECOVERING

    @pytest.mark.asyncio
    async def test_start_retry_succeeds(self, h: Harness) -> None:
        h.controller.start()
        await h.hear(WAKE, is_final=False)
        h.factory.fail_next_starts(1)
        await h.finish_speech()

        assert h.controller.state is DialogueState.CAPTURING_COMMAND
        assert h.controller.session is not None
        assert not h.controller.session.is_active

        await h.pump()

        assert h.controller.session.is_active
        assert h.factory.latest.start_count == 2
        assert h.factory.active_count == 1

    @pytest.mark.asyncio
    async def test_start_retries_exhausted_recovers(self, h: Harness) -> None:
        h.controller.start()
        await h.hear(WAKE, is_final=False)
        h.factory.fail_next_starts(h.dialogue.start_retry_attempts)
        await h.finish_speech()
        await h.pump(rounds=5)

        assert h.controller.state is DialogueState.RECOVERING
        assert h.factory.latest.start_count == h.dialogue.start_retry_attempts
        assert h.channel.last_text == h.dialogue.apology


class TestStaleEvents:
    """Tests for events from superseded sessions and utterances."""

    @pytest.mark.asyncio
    async def test_late_ambient_result_is_discarded(self, h: Harness) -> None:
        h.controller.start()
        ambient = h.factory.latest
        await h.hear(WAKE, is_final=False)

        ambient.emit_result("olá smart home de novo", is_final=True)
        await h.controller.process_pending()

        assert h.controller.state is DialogueState.ACKNOWLEDGING
        assert len(h.channel.spoken) == 1
        assert len(h.factory.engines) == 1

    @pytest.mark.asyncio
    async def test_late_error_from_stopped_session_is_discarded(self, h: Harness) -> None:
        h.controller.start()
        ambient = h.factory.latest
        await h.wake()

        ambient.emit_error("aborted")
        await h.controller.process_pending()

        assert h.controller.state is DialogueState.CAPTURING_COMMAND

    @pytest.mark.asyncio
    async def test_unknown_speech_token_is_discarded(self, h: Harness) -> None:
        h.controller.start()
        await h.hear(WAKE, is_final=False)

        await h.controller.handle(SpeechDone(token=999))

        assert h.controller.state is DialogueState.ACKNOWLEDGING
        assert h.controller.speech_token is not None


class TestFollowUp:
    """Tests for the topic follow-up."""

    @pytest.mark.asyncio
    async def test_topic_question_then_narration(self, h: Harness) -> None:
        h.classifier.enqueue(
            Intent(IntentAction.INITIATE_FOLLOW_TOPIC, spoken_response="Qual assunto?")
        )
        h.controller.start()
        await h.wake()
        await h.hear("quero ouvir notícias")

        assert h.controller.follow_up.pending is True
        assert h.channel.last_text == "Qual assunto?"

        await h.finish_speech()
        assert h.controller.state is DialogueState.AWAITING_FOLLOW_UP
        assert h.controller.session.mode is RecognitionMode.COMMAND

        await h.hear("esportes")

        assert h.classifier.call_count == 1
        assert h.content.topics == ["esportes"]
        assert h.controller.follow_up.pending is False
        assert h.channel.spoken[-1] == ("Sem novidades sobre esportes.", 1.2)

        await h.finish_speech()
        assert h.controller.state is DialogueState.AMBIENT

    @pytest.mark.asyncio
    async def test_capture_error_clears_follow_up(self, h: Harness) -> None:
        h.classifier.enqueue(Intent(IntentAction.INITIATE_FOLLOW_TOPIC, spoken_response="Qual?"))
        h.controller.start()
        await h.wake()
        await h.hear("notícias")
        await h.finish_speech()

        h.factory.latest.emit_error("no-speech")
        await h.controller.process_pending()

        assert h.controller.state is DialogueState.RECOVERING
        assert h.controller.follow_up.pending is False


class TestInteractionLog:
    """Tests for cycle records written by the controller."""

    @pytest.mark.asyncio
    async def test_completed_cycle_is_logged(self, tmp_path: Path) -> None:
        log = JSONLWriter(tmp_path)
        h = make_harness(interaction_log=log)
        h.classifier.enqueue(Intent(IntentAction.ADD_REMINDER, text="pão"))
        h.controller.start()
        await h.wake()
        await h.hear("lembrar pão")
        await h.finish_speech()

        [cycle] = log.read(datetime.now(UTC).date())
        assert cycle.transcript == "lembrar pão"
        assert cycle.intent == "ADD_REMINDER"
        assert cycle.intent_text == "pão"
        assert cycle.response == "Adicionado: pão"
        assert cycle.outcome is CycleOutcome.COMPLETED
        assert "total" in cycle.latency_ms
        assert "classify" in cycle.latency_ms

    @pytest.mark.asyncio
    async def test_follow_up_writes_two_cycles(self, tmp_path: Path) -> None:
        log = JSONLWriter(tmp_path)
        h = make_harness(interaction_log=log)
        h.classifier.enqueue(Intent(IntentAction.INITIATE_FOLLOW_TOPIC, spoken_response="Qual?"))
        h.controller.start()
        await h.wake()
        await h.hear("notícias")
        await h.finish_speech()
        await h.hear("cultura")
        await h.finish_speech()

        first, second = log.read(datetime.now(UTC).date())
        assert first.outcome is CycleOutcome.FOLLOW_UP
        assert first.follow_up is False
        assert second.follow_up is True
        assert second.transcript == "cultura"
        assert second.intent_text == "cultura"

    @pytest.mark.asyncio
    async def test_recognition_failure_is_logged(self, tmp_path: Path) -> None:
        log = JSONLWriter(tmp_path)
        h = make_harness(interaction_log=log)
        h.controller.start()
        await h.wake()
        h.factory.latest.emit_error("no-speech")
        await h.controller.process_pending()
        await h.finish_speech()

        [cycle] = log.read(datetime.now(UTC).date())
        assert cycle.outcome is CycleOutcome.RECOGNITION_FAILED
        assert cycle.error == "no-speech"


class TestRunLoop:
    """Tests for run() and stop()."""

    @pytest.mark.asyncio
    async def test_stop_ends_run_and_releases_resources(self, h: Harness) -> None:
        task = asyncio.create_task(h.controller.run())
        await asyncio.sleep(0.01)
        h.factory.latest.emit_result(WAKE, is_final=False)
        await asyncio.sleep(0.01)

        assert h.controller.state is DialogueState.ACKNOWLEDGING
        assert h.channel.is_speaking

        h.controller.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert task.done()
        assert h.factory.active_count == 0
        assert not h.channel.is_speaking

    @pytest.mark.asyncio
    async def test_stop_during_classification_drops_the_reply(self) -> None:
        h = make_harness(classifier=SlowClassifier())
        h.controller.start()
        await h.wake()

        pending = asyncio.create_task(h.hear("bom dia"))
        await asyncio.sleep(0.05)
        assert h.controller.state is DialogueState.CLASSIFYING

        h.controller.stop()
        await asyncio.wait_for(pending, timeout=2.0)

        assert h.channel.spoken_texts == ["Sim? Estou ouvindo."]
        assert h.controller.speech_token is None
        assert h.factory.active_count == 0

    @pytest.mark.asyncio
    async def test_from_config(self) -> None:
        config = PainelConfig()
        config.dialogue.acknowledgement = "Pois não?"
        factory = MockEngineFactory()
        channel = MockSynthesisChannel()
        controller = DialogueController.from_config(
            config,
            factory,
            channel,
            MockIntentClassifier(),
            ActionExecutor.from_config(config, InMemoryReminderStore(), MockContentService()),
        )
        controller.start()
        factory.latest.emit_result(WAKE, is_final=False)
        await controller.process_pending()

        assert channel.last_text == "Pois não?"
