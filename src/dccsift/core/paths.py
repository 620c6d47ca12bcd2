"""Conversion between Windows drive paths and WSL mount paths.

Build output always speaks Windows (``W:\\src\\Unit.pas``). Reports speak
whichever convention the caller asked for, and file access uses whatever the
host understands.
"""

from __future__ import annotations

import os
import re

_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:\\")
_MOUNT_PREFIX = "/mnt/"


def is_mount_path(path: str) -> bool:
    """``/mnt/w/...`` style path."""
    return path.startswith(_MOUNT_PREFIX)


def is_windows_path(path: str) -> bool:
    """``W:\\...`` style path."""
    return bool(_WINDOWS_DRIVE_RE.match(path))


def mount_to_windows(path: str) -> str:
    """``/mnt/w/folder/file.pas`` -> ``W:\\folder\\file.pas``."""
    if not is_mount_path(path) or len(path) < 6:
        return path
    drive = path[5].upper()
    rest = path[6:].replace("/", "\\")
    return f"{drive}:{rest}"


def windows_to_mount(path: str) -> str:
    """``W:\\folder\\file.pas`` -> ``/mnt/w/folder/file.pas``."""
    if not is_windows_path(path):
        return path
    drive = path[0].lower()
    rest = path[2:].replace("\\", "/")
    return f"{_MOUNT_PREFIX}{drive}{rest}"


def normalize_for_output(path: str, wsl_mode: bool) -> str:
    """Normalize a path for the report: mount style in WSL mode, Windows otherwise."""
    if not path:
        return path
    if wsl_mode:
        return windows_to_mount(path)
    return mount_to_windows(path)


def to_host(path: str) -> str:
    """Convert a path from either convention to one the running host can open."""
    if not path:
        return path
    if os.name == "nt":
        return mount_to_windows(path)
    # Relative Windows fragments (Win64\Release) become POSIX separators too
    return windows_to_mount(path).replace("\\", "/")
