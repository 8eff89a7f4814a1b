"""Profile selection for the panel.

A profile is any YAML file in the config directory except ``base.yaml``.
The kiosk behind the dashboard is a Raspberry Pi and runs ``prod``;
desktops run ``dev`` unless PAINEL_PROFILE names another shipped profile.
"""

import logging
import os
import platform
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"
PROFILE_ENV = "PAINEL_PROFILE"
BASE_PROFILE = "base"
DESKTOP_PROFILE = "dev"
KIOSK_PROFILE = "prod"


def is_macos() -> bool:
    """Return True where the ``say`` command and its pt-BR voices exist."""
    return platform.system() == "Darwin"


def is_raspberry_pi(cpuinfo: Path = Path("/proc/cpuinfo")) -> bool:
    """Return True when running on the dashboard kiosk hardware."""
    if platform.system() != "Linux":
        return False
    try:
        return "Raspberry Pi" in cpuinfo.read_text(errors="ignore")
    except OSError:
        return False


def available_profiles(config_dir: Path | None = None) -> list[str]:
    """List the profile names shipped in the config directory."""
    directory = config_dir or CONFIG_DIR
    return sorted(path.stem for path in directory.glob("*.yaml") if path.stem != BASE_PROFILE)


def detect_profile(config_dir: Path | None = None) -> str:
    """Pick the profile to load.

    PAINEL_PROFILE wins when it names a shipped profile. An unknown name is
    logged and ignored. Otherwise the kiosk gets ``prod`` and everything
    else ``dev``.

    Args:
        config_dir: Directory holding the profile files

    Returns:
        Profile name
    """
    requested = os.environ.get(PROFILE_ENV, "").strip().lower()
    if requested:
        profiles = available_profiles(config_dir)
        if requested in profiles:
            return requested
        logger.warning(
            "Ignoring %s=%s, available profiles: %s",
            PROFILE_ENV,
            requested,
            ", ".join(profiles) or "none",
        )

    return KIOSK_PROFILE if is_raspberry_pi() else DESKTOP_PROFILE


__all__ = [
    "CONFIG_DIR",
    "PROFILE_ENV",
    "available_profiles",
    "detect_profile",
    "is_macos",
    "is_raspberry_pi",
]
