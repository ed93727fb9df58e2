"""Version lookup for the MIDI tools.

``get_app_version`` checks, in order, the ``SMF_TOOLS_VERSION`` environment
variable, the ``VERSION`` file packaged next to this module and ``git
describe`` for source checkouts, falling back to ``0.0.0-dev``.
"""

from __future__ import annotations

import os
import subprocess
from functools import lru_cache
from importlib import resources
from typing import Callable, Optional

from packaging.version import InvalidVersion, Version

FALLBACK_VERSION = "0.0.0-dev"
VERSION_ENV = "SMF_TOOLS_VERSION"


def _from_env() -> Optional[str]:
    return os.environ.get(VERSION_ENV) or None


def _from_version_file() -> Optional[str]:
    try:
        text = resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError):
        return None
    return text.strip() or None


def _from_git() -> Optional[str]:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return output.strip() or None


_RESOLVERS: tuple[Callable[[], Optional[str]], ...] = (_from_env, _from_version_file, _from_git)


def _strip_tag_prefix(raw_version: str) -> str:
    version = raw_version.strip()
    return version[1:] if version[:1] in {"v", "V"} else version


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the smf-tools version string without a leading ``v``."""

    for resolver in _RESOLVERS:
        raw = resolver()
        if raw:
            return _strip_tag_prefix(raw)
    return FALLBACK_VERSION


def is_development_version(version: str) -> bool:
    """Return ``True`` for pre-releases, local builds and non PEP 440 strings.

    ``git describe`` output such as ``1.2.0-3-gabcdef`` is not a valid PEP 440
    version and therefore counts as a development build.
    """

    try:
        parsed = Version(version)
    except InvalidVersion:
        return True
    return bool(parsed.is_prerelease or parsed.is_devrelease or parsed.local)


def describe_app_version() -> str:
    """Version text shown by ``--version`` flags."""

    version = get_app_version()
    if is_development_version(version):
        return f"{version} (development build)"
    return version


__all__ = ["describe_app_version", "get_app_version", "is_development_version"]
