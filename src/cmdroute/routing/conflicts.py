"""Route conflict types and definitions."""

from dataclasses import dataclass
from enum import Enum


class DiagnosticKind(str, Enum):
    """Types of route table conflicts"""

    DUPLICATE_ROUTE = "duplicate_route"
    AMBIGUOUS_TYPES = "ambiguous_types"
    UNREACHABLE_ROUTE = "unreachable_route"


@dataclass
class RouteDiagnostic:
    """Represents a conflict between routes of one table"""

    kind: DiagnosticKind
    patterns: tuple[str, ...]
    signature: str
    message: str
    shadowed_by: str | None = None
