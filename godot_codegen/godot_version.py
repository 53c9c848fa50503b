"""Parsing of the version string printed by the Godot executable."""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_RE = re.compile(
    r"(\d+)\.(\d+)(?:\.(\d+))?\.(alpha|beta|dev|stable)[0-9]*\."
    r"(?:(?:official|custom_build)\.([a-f0-9]+)|official)"
)

_U8_MAX = 255


@dataclass(frozen=True)
class GodotVersion:
    """A parsed Godot version."""

    full_string: str
    """The matched version text, stripped of anything around it."""
    major: int
    minor: int
    patch: int
    """0 if the version has no patch component."""
    stability: str
    """One of alpha, beta, dev or stable."""
    custom_rev: str | None = None
    """Git revision after 'custom_build.' or 'official.', if present."""


def _parse_u8(text: str) -> int:
    value = int(text)
    if value > _U8_MAX:
        raise ValueError(f"number too large to fit in target type: {text}")
    return value


def parse_godot_version(version_str: str) -> GodotVersion:
    """Parse the output of ``godot --version``; raise ValueError if it does not match."""
    match = _VERSION_RE.search(version_str)
    if match is None:
        raise ValueError(f"Regex capture failed for '{version_str}'")

    major, minor, patch, stability, custom_rev = match.groups()
    return GodotVersion(
        full_string=match.group(0),
        major=_parse_u8(major),
        minor=_parse_u8(minor),
        patch=_parse_u8(patch) if patch is not None else 0,
        stability=stability,
        custom_rev=custom_rev,
    )