# Overview: Error taxonomy shared by the hierarchy, naming and location services.

"""
Hierarchy errors

DETERMINISTIC (caller-logic bugs if they happen after a proactive check):
- LocationNotFound: parent/household missing or inactive
- RuleViolation: (parent_type -> child_type) not allowed by the active rule-set
- CycleError: proposed rule matrix contains a directed cycle
- MatrixValidationError / UnknownPresetError: malformed rule edits

RETRYABLE:
- AutoNumberConflict: a concurrent creation took the same auto number.
  Recover by calling generate_name again against fresh sibling data.
"""

from __future__ import annotations

from homestock.services.hierarchy_graph import format_cycle


class HierarchyError(Exception):
    """Base class for location hierarchy errors."""
    retryable = False

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class LocationNotFound(HierarchyError):
    """Raised when a referenced location or household does not exist or is inactive."""


class RuleViolation(HierarchyError):
    """Raised when a placement is not allowed under the active rule-set."""


class CycleError(HierarchyError):
    """Raised when a rule matrix would allow circular containment."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(
            f"Circular containment: {format_cycle(self.cycle)}",
            details={"cycle": self.cycle},
        )


class MatrixValidationError(HierarchyError):
    """Raised when a rule matrix is incomplete or references unknown types."""


class UnknownPresetError(HierarchyError):
    """Raised when a preset name has no rule list."""


class AutoNumberConflict(HierarchyError):
    """Raised when an insert collides on (parent, type, auto_number) among active siblings."""
    retryable = True


class SequenceExhausted(HierarchyError):
    """Raised when a letter sequence has no unused value left."""
