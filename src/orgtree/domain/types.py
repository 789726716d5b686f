"""Node and diagnostic classification enums."""

from __future__ import annotations

from enum import StrEnum


class NodeType(StrEnum):
    """Kinds of node in a built tree."""

    ROOT = "root"
    GROUP = "group"
    POSITION = "position"


class DiagnosticCode(StrEnum):
    """Reasons an id or level was skipped during resolution or building."""

    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    NO_VALUE = "NO_VALUE"
    AMBIGUOUS_VALUE = "AMBIGUOUS_VALUE"
    UNKNOWN_VALUE = "UNKNOWN_VALUE"
    UNKNOWN_LEVEL_FIELD = "UNKNOWN_LEVEL_FIELD"
    FALLBACK = "FALLBACK"
