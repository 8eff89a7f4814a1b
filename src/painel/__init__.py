"""Painel - voice assistant for the Smart Home dashboard.

The voice controller listens for "Olá Smart Home" and then:
- Adds reminders to the dashboard (MongoDB)
- Answers short questions (Claude)
- Reads the news on a topic, asking for the topic when needed

Usage:
    python -m painel --profile dev
    python -m painel --console
"""

__version__ = "0.1.0"

from .config import PainelConfig
from .config.loader import load_config

__all__ = [
    "PainelConfig",
    "__version__",
    "load_config",
]
