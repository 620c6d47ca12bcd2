"""MSBuild ``$(Name)`` placeholder substitution."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

_PLACEHOLDER_RE = re.compile(r"\$\((\w+)\)")


def resolve_env_vars(value: str, env_vars: Mapping[str, str]) -> str:
    """Substitute placeholders named in the environment-variable table.

    A real process environment variable with the same name wins over the
    table value. Names missing from the table are left untouched.
    """
    if "$(" not in value:
        return value

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1).upper()
        if name not in env_vars:
            return match.group(0)
        return os.environ.get(name) or env_vars[name]

    return _PLACEHOLDER_RE.sub(_substitute, value)


def resolve_variables(
    value: str,
    *,
    config: str,
    platform: str,
    project_dir: str,
    env_vars: Mapping[str, str],
) -> str:
    """Substitute built-in build variables, then the environment-variable table.

    ``project_dir`` should carry its trailing separator, as MSBuild's does.
    """
    if "$(" not in value:
        return value

    builtins = {
        "config": config,
        "configuration": config,
        "platform": platform,
        "projectdir": project_dir,
    }

    def _substitute(match: re.Match[str]) -> str:
        return builtins.get(match.group(1).lower(), match.group(0))

    return resolve_env_vars(_PLACEHOLDER_RE.sub(_substitute, value), env_vars)
