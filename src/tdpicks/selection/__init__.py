"""Eligibility filtering, status validation and quota selection."""

from .eligibility import EligibilityFilter, EligibilityReport
from .quota import QuotaSelector, SelectionResult, ValidationPolicy, apply_team_limits
from .validator import (
    RosterStatusValidator,
    StaticStatusValidator,
    StatusValidator,
    ValidationResult,
    names_match,
)

__all__ = [
    "EligibilityFilter",
    "EligibilityReport",
    "QuotaSelector",
    "RosterStatusValidator",
    "SelectionResult",
    "StaticStatusValidator",
    "StatusValidator",
    "ValidationPolicy",
    "ValidationResult",
    "apply_team_limits",
    "names_match",
]
