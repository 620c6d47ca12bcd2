"""Priority-scoped property resolution over conditioned PropertyGroups.

A .dproj defines the same property in several PropertyGroups, each guarded by
a condition naming its scope::

    <PropertyGroup Condition="'$(Base)'!=''">            base
    <PropertyGroup Condition="'$(Base_Win64)'!=''">      base + platform
    <PropertyGroup Condition="'$(Cfg_1)'!=''">           config
    <PropertyGroup Condition="'$(Cfg_1_Win64)'!=''">     config + platform

The most specific scope that matches the active configuration and platform
wins, wherever it appears in the file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class Priority(IntEnum):
    """Scope rank of a PropertyGroup; higher overrides lower."""

    ABSENT = 0
    BASE = 1
    BASE_PLATFORM = 2
    CONFIG = 3
    CONFIG_PLATFORM = 4


@dataclass(frozen=True)
class ScopedProperty:
    """A property value and the scope it was read from."""

    value: str = ""
    priority: Priority = Priority.ABSENT

    @property
    def found(self) -> bool:
        return self.priority is not Priority.ABSENT


_CONDITION_RE = re.compile(r'\sCondition="([^"]*)"')


def find_config_key(content: str, config: str) -> str | None:
    """Internal key of a configuration, e.g. Release -> Cfg_1."""
    match = re.search(
        r'<BuildConfiguration\s+Include="' + re.escape(config) + r'">\s*<Key>(\w+)</Key>',
        content,
        re.IGNORECASE,
    )
    return match.group(1) if match else None


def classify_condition(condition: str, config_key: str | None, platform: str) -> Priority:
    """Rank a PropertyGroup condition against the active configuration/platform.

    A config+platform condition also mentions the bare config key (Cfg_1_Win64
    contains Cfg_1), so config-only and base-only matches exclude conditions
    naming an underscore-suffixed variant.
    """
    if config_key:
        if f"$({config_key}_{platform})" in condition:
            return Priority.CONFIG_PLATFORM
        if f"$({config_key})" in condition and f"$({config_key}_" not in condition:
            return Priority.CONFIG
    if f"$(Base_{platform})" in condition:
        return Priority.BASE_PLATFORM
    if "$(Base)" in condition and "$(Base_" not in condition:
        return Priority.BASE
    return Priority.ABSENT


def _property_pattern(name: str) -> re.Pattern[str]:
    escaped = re.escape(name)
    return re.compile(r"<" + escaped + r"(?:\s[^>]*)?>([^<]+)</" + escaped + r">")


def find_property(content: str, name: str) -> str:
    """First unscoped definition of ``name`` anywhere in ``content``."""
    match = _property_pattern(name).search(content)
    return match.group(1).strip() if match else ""


def resolve_scoped_property(
    content: str, name: str, config: str, platform: str
) -> ScopedProperty:
    """Highest-priority definition of ``name`` for the given configuration and platform.

    Unconditioned PropertyGroups (project metadata) are ignored. At equal
    priority the first definition in document order is kept.
    """
    config_key = find_config_key(content, config)
    pattern = _property_pattern(name)
    best = ScopedProperty()

    for chunk in content.split("<PropertyGroup")[1:]:
        tag_end = chunk.find(">")
        if tag_end < 0:
            continue
        condition = _CONDITION_RE.search(chunk[: tag_end + 1])
        if condition is None:
            continue
        priority = classify_condition(condition.group(1), config_key, platform)
        if priority is Priority.ABSENT or priority <= best.priority:
            continue

        body = chunk[tag_end + 1 :].split("</PropertyGroup>", 1)[0]
        match = pattern.search(body)
        if match:
            best = ScopedProperty(value=match.group(1).strip(), priority=priority)

    return best
