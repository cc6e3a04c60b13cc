"""
Data Models Package

This package contains all Pydantic models used by the FNA intake system.
All data flowing through the system must conform to these schemas.
"""

from src.models.client import Client, FnaSession
from src.models.fna import (
    FNA_FIELDS,
    NUMERIC_FIELDS,
    AssetsSection,
    FamilyPlanningSection,
    FieldGroup,
    FieldKind,
    FieldSpec,
    FnaHeader,
    GoalsSection,
    HouseholdSection,
    IncomeRetirementSection,
    InsuranceNeedsSection,
    SaveResult,
    coerce_amount,
    coerce_count,
    coerce_tri_state,
    describe_validation_error,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Client models
    "Client",
    "FnaSession",
    # FNA models
    "FNA_FIELDS",
    "NUMERIC_FIELDS",
    "AssetsSection",
    "FamilyPlanningSection",
    "FieldGroup",
    "FieldKind",
    "FieldSpec",
    "FnaHeader",
    "GoalsSection",
    "HouseholdSection",
    "IncomeRetirementSection",
    "InsuranceNeedsSection",
    "SaveResult",
    "coerce_amount",
    "coerce_count",
    "coerce_tri_state",
    "describe_validation_error",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
