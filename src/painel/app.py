"""Assembly of the voice subsystem from configuration."""

import logging

from .ai import create_ai_services
from .config import PainelConfig
from .dialogue import ActionExecutor, DialogueController
from .logger import create_interaction_log
from .recognition import create_engine_factory
from .reminders import create_reminder_store
from .tts import create_synthesis_channel

logger = logging.getLogger(__name__)


def create_controller(config: PainelConfig, use_mocks: bool = False) -> DialogueController | None:
    """Build the dialogue controller and its collaborators.

    Args:
        config: Loaded configuration
        use_mocks: Use mock recognition, speech, AI and an in-memory store

    Returns:
        The controller, or None when no recognition engine is available and
        the voice subsystem has to stay disabled.
    """
    engine_factory = create_engine_factory(config.recognition, use_mock=use_mocks)
    if engine_factory is None:
        logger.warning("Voice subsystem disabled: no speech recognition engine available")
        return None

    channel = create_synthesis_channel(config.tts, config.audio, use_mock=use_mocks)
    classifier, content = create_ai_services(config, use_mock=use_mocks)
    store = create_reminder_store(config.reminders, use_mock=use_mocks)
    executor = ActionExecutor.from_config(config, store, content)

    return DialogueController.from_config(
        config,
        engine_factory,
        channel,
        classifier,
        executor,
        interaction_log=create_interaction_log(config.logging),
    )


__all__ = ["create_controller"]
