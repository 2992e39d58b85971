"""
Configuration loader — reads profile.yml into a PatchProfile.

The default profile ships inside the package; ``--config`` points the
CLI at an alternate file.  It reads YAML, validates against the pydantic
schema, and returns a frozen profile.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from n2s_installer.core.data import DEFAULT_PROFILE_PATH
from n2s_installer.core.models.profile import PatchProfile

logger = logging.getLogger(__name__)

SOURCE_DIR_ENV = "N2S_SOURCE_DIR"


class ConfigError(Exception):
    """Raised when the profile is invalid or missing."""


def load_profile(path: Path | None = None) -> PatchProfile:
    """Load and validate a patch profile.

    Args:
        path: Explicit path to a profile YAML. If None, the packaged
            default is used.

    Returns:
        Validated, frozen PatchProfile.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = DEFAULT_PROFILE_PATH

    if not path.is_file():
        raise ConfigError(f"Profile not found: {path}")

    logger.debug("Loading patch profile from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        profile = PatchProfile.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid profile: {e}") from e

    logger.info(
        "Loaded profile for %s %s (%d changed, %d added files, %d added dirs)",
        profile.package_name,
        profile.target_version,
        len(profile.targets.changed_files),
        len(profile.targets.added_files),
        len(profile.targets.added_dirs),
    )
    return profile


def resolve_source_dir(profile: PatchProfile, explicit: str | Path | None = None) -> Path:
    """Locate the project source tree holding the replacement files.

    Precedence: explicit argument > ``N2S_SOURCE_DIR`` > profile default.
    Relative paths resolve against the current working directory.
    """
    raw = explicit or os.environ.get(SOURCE_DIR_ENV) or profile.source_dir
    return Path(raw).expanduser().resolve()
