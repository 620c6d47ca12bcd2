"""Configuration constants.

Protocol constraints and implementation details that are NOT user-configurable.
For configurable values, see models.py.
"""

# =============================================================================
# Lookup
# =============================================================================

LOOKUP_RESULTS_MAX = 3
"""Hard cap on lookup entries attached to a single issue."""

LOOKUP_TIMEOUT_SEC_DEFAULT = 5.0
"""Per-symbol timeout for the external lookup tool."""

# =============================================================================
# Issue collection
# =============================================================================

MAX_ERRORS_DEFAULT = 3
"""Errors stored before truncation kicks in; later ones are cascade noise."""

CONTEXT_LINES_DEFAULT = 5
"""Lines of source shown before and after an issue."""

CONTEXT_MARKER = "  // <-- HERE"
"""Suffix appended to the reported line in a context window."""

# =============================================================================
# Discovery
# =============================================================================

FILE_INDEX_RELATIVE = ".public\\.file-index.txt"
"""File index location relative to the project's drive root."""

ENVIRONMENT_PROJ_TEMPLATE = "Embarcadero\\BDS\\{version}\\environment.proj"
"""IDE environment file location relative to %APPDATA%."""

REPO_CONFIG_DIR = ".dccsift"
"""Per-project config directory, next to the project file."""
