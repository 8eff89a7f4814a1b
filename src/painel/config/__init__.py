"""Configuration module for the Painel voice assistant.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class WakeWordConfig:
    """Wake phrase detection configuration."""

    phrases: list[str] = field(default_factory=lambda: ["olá smart home", "ola smart home"])
    window_chars: int = 40


@dataclass
class RecognitionConfig:
    """Speech recognition configuration."""

    engine: str = "auto"
    language: str = "pt-BR"
    model: str = "small"
    device: str = "cpu"
    compute_type: str = "int8"
    input_device: str = "default"
    sample_rate: int = 16000
    chunk_size: int = 1024
    energy_threshold: float = 500.0
    silence_timeout_ms: int = 900
    max_utterance_ms: int = 10000
    no_speech_timeout_ms: int = 8000


@dataclass
class TTSConfig:
    """Text-to-speech configuration."""

    engine: str = "auto"
    voice: str | None = None
    locale: str = "pt-BR"
    rate: float = 1.0
    narration_rate: float = 1.2
    model_path: str | None = None


@dataclass
class AudioConfig:
    """Audio output configuration."""

    output_device: str = "default"
    sample_rate: int = 22050


@dataclass
class LLMConfig:
    """Language model configuration for classification and narration."""

    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 400
    temperature: float = 0.4
    timeout_seconds: float = 8.0


@dataclass
class ContentConfig:
    """Topic narration configuration."""

    search_enabled: bool = True
    max_results: int = 5
    region: str = "Maricá-RJ"
    timeout_seconds: float = 20.0


@dataclass
class ReminderConfig:
    """Reminder store configuration."""

    backend: str = "mongodb"
    uri: str = "mongodb://localhost:27017"
    database: str = "painel"
    collection: str = "reminders"
    timeout_seconds: float = 5.0
    server_selection_timeout_ms: int = 3000


@dataclass
class DialogueConfig:
    """Spoken phrases and recovery timing for the dialogue controller."""

    acknowledgement: str = "Sim? Estou ouvindo."
    apology: str = "Desculpe, não entendi."
    classifier_apology: str = "Desculpe, tive um problema para processar isso."
    content_apology: str = "Desculpe, não consegui buscar esse assunto agora."
    reminder_apology: str = "Desculpe, não consegui salvar o lembrete."
    start_retry_attempts: int = 3
    start_retry_delay_ms: int = 300
    ambient_restart_delay_ms: int = 500


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    enabled: bool = True
    log_dir: str = "~/painel/logs"


@dataclass
class TestingConfig:
    """Testing configuration."""

    mock_voice_enabled: bool = False


@dataclass
class PainelConfig:
    """Main Painel configuration."""

    wake_word: WakeWordConfig = field(default_factory=WakeWordConfig)
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    tts: TTSConfig = field(default_factory=TTSConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    dialogue: DialogueConfig = field(default_factory=DialogueConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> PainelConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> PainelConfig:
        """Load configuration by profile name (dev, prod, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


__all__ = [
    "AudioConfig",
    "ConfigLoader",
    "ContentConfig",
    "DialogueConfig",
    "LLMConfig",
    "LoggingConfig",
    "PainelConfig",
    "RecognitionConfig",
    "ReminderConfig",
    "TTSConfig",
    "TestingConfig",
    "WakeWordConfig",
]
