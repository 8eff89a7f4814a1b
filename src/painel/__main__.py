"""Painel voice assistant entry point.

Usage:
    python -m painel [OPTIONS]

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --dry-run        Load config and exit
    --mock-voice     Use mock recognition, speech and services
    --console        Type commands instead of speaking them
    --version        Show version
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import PainelConfig
from .config.loader import load_config
from .config.profiles import available_profiles, detect_profile

# Project root .env first, then the current directory
_env_file = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_file if _env_file.exists() else None)


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="painel",
        description="Painel - voice assistant for the Smart Home dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m painel                     # Run with auto-detected profile
  python -m painel --profile prod      # Run with production profile
  python -m painel --console           # Type commands at the terminal

Environment:
  PAINEL_PROFILE       Set profile (dev, prod, test)
  ANTHROPIC_API_KEY    Claude API key (classification and news)
  TAVILY_API_KEY       Tavily API key (news headlines)
  PAINEL_MONGODB_URI   Reminder database URI
""",
    )

    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument(
        "--profile",
        choices=available_profiles(),
        help="Configuration profile to use",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Painel v{__version__}",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and exit (for testing)",
    )
    parser.add_argument(
        "--mock-voice",
        action="store_true",
        help="Use mock recognition, speech and services (no hardware or API keys)",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use typed input instead of the microphone",
    )

    return parser.parse_args(argv)


def print_banner(config: PainelConfig, profile: str) -> None:
    print("\n" + "=" * 50)
    print("  Painel Smart Home - voz")
    print("=" * 50)
    print(f"  Version: {__version__}")
    print(f"  Profile: {profile}")
    print(f"  Wake phrase: {config.wake_word.phrases[0]}")
    print(f"  Recognition: {config.recognition.engine} ({config.recognition.language})")
    print(f"  LLM: {config.llm.model}")
    print(f"  TTS: {config.tts.engine} ({config.tts.voice or config.tts.locale})")
    print(f"  Reminders: {config.reminders.backend}")
    print("=" * 50 + "\n")


async def run_voice(config: PainelConfig, use_mocks: bool) -> int:
    """Run the dialogue controller until SIGINT or SIGTERM."""
    from .app import create_controller

    logger = logging.getLogger("painel")
    controller = create_controller(config, use_mocks=use_mocks)
    if controller is None:
        logger.info("Nothing to run; exiting")
        return 0

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, controller.stop)
        except NotImplementedError:
            signal.signal(sig, lambda _s, _f: loop.call_soon_threadsafe(controller.stop))

    logger.info("Listening for '%s'", config.wake_word.phrases[0])
    print(f"\nListening for '{config.wake_word.phrases[0]}'...")
    print("Press Ctrl+C to stop.\n")

    await controller.run()
    logger.info("Painel shut down gracefully")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)
    profile = args.profile or detect_profile()

    try:
        config = load_config(path=args.config) if args.config else load_config(profile=profile)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if args.console:
        config.recognition.engine = "console"

    setup_logging(config.logging.level)
    logger = logging.getLogger("painel")
    logger.info("Painel v%s", __version__)
    logger.info("Profile: %s", profile)

    if args.dry_run:
        logger.info("Dry run mode - exiting after config load")
        logger.info("Wake phrases: %s", ", ".join(config.wake_word.phrases))
        logger.info("Recognition: %s (%s)", config.recognition.engine, config.recognition.model)
        logger.info("LLM: %s", config.llm.model)
        logger.info("Reminders: %s", config.reminders.backend)
        return 0

    print_banner(config, profile)
    use_mocks = config.testing.mock_voice_enabled or args.mock_voice

    try:
        return asyncio.run(run_voice(config, use_mocks))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        return 0


if __name__ == "__main__":
    sys.exit(main())
