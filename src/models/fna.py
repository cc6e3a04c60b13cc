"""
FNA Header Models

One FNA header row exists per client. On screen it is a single form;
here it is split into explicit field groups so that every field is
coerced and checked when a group is constructed, not at save time.

INVARIANTS enforced by the group models:
1. Numeric fields are None or a finite number. Empty form input
   becomes None, never zero and never NaN.
2. Tri-state flags are exactly True, False or None (unknown).
3. Text fields are never None; a missing value is an empty string.

DESIGN DECISION: Amounts are Decimal in memory and plain JSON numbers
on the wire. There is no range validation; negative amounts pass.
"""

import math
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class FieldKind(str, Enum):
    """How a field is captured on the form."""
    TEXT = "text"
    TEXTAREA = "textarea"
    YES_NO = "yes_no"
    INTEGER = "integer"
    CURRENCY = "currency"
    DATE = "date"
    TIME = "time"


class FieldGroup(str, Enum):
    """
    Field groups of an FNA header.

    Values double as the attribute names on FnaHeader.
    """
    HOUSEHOLD = "household"
    FAMILY = "family"
    GOALS = "goals"
    ASSETS = "assets"
    INSURANCE = "insurance"
    INCOME = "income"


# =============================================================================
# COERCION
# =============================================================================

def _blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def coerce_amount(raw: Any) -> Optional[Decimal]:
    """
    Coerce raw form input to a nullable finite number.

    "" -> None, "1200" -> Decimal("1200"), "0" -> Decimal("0").

    Raises:
        ValueError: if the input is not a finite number
    """
    if _blank(raw):
        return None
    if isinstance(raw, bool):
        raise ValueError(f"{raw!r} is not a number")
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            raise ValueError(f"{raw!r} is not a number")
    else:
        raise ValueError(f"{raw!r} is not a number")

    if not value.is_finite() or not math.isfinite(float(value)):
        raise ValueError(f"{raw!r} is not a finite number")
    return value


def coerce_count(raw: Any) -> Optional[int]:
    """Like coerce_amount, but the number must be whole."""
    value = coerce_amount(raw)
    if value is None:
        return None
    if value != value.to_integral_value():
        raise ValueError(f"{raw!r} is not a whole number")
    return int(value)


_TRUE_WORDS = {"true", "yes", "y"}
_FALSE_WORDS = {"false", "no", "n"}


def coerce_tri_state(raw: Any) -> Optional[bool]:
    """
    Coerce to True / False / None.

    None and "" mean unknown. Anything else that is not clearly a yes
    or a no is rejected.
    """
    if isinstance(raw, bool):
        return raw
    if _blank(raw):
        return None
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"{raw!r} is not yes, no or unknown")


def coerce_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def blank_to_none(raw: Any) -> Any:
    return None if _blank(raw) else raw


def _number_to_json(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


# =============================================================================
# FIELD REGISTRY
# =============================================================================

class FieldSpec(BaseModel):
    """Declaration of one editable FNA header field."""
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    kind: FieldKind
    group: FieldGroup

    @property
    def is_numeric(self) -> bool:
        return self.kind in (FieldKind.INTEGER, FieldKind.CURRENCY)

    def accepts(self, value: Any) -> bool:
        """
        Basic type tagging for a raw form value.

        No parsing happens here; numbers may still be raw strings.
        """
        if value is None:
            return True
        if self.kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
            return isinstance(value, str)
        if self.kind == FieldKind.YES_NO:
            return isinstance(value, bool)
        if self.is_numeric:
            return isinstance(value, (str, int, float, Decimal)) and not isinstance(value, bool)
        if self.kind == FieldKind.DATE:
            return isinstance(value, (str, date))
        if self.kind == FieldKind.TIME:
            return isinstance(value, (str, time))
        return False


def _spec(name: str, label: str, kind: FieldKind, group: FieldGroup) -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=kind, group=group)


FNA_FIELDS: dict[str, FieldSpec] = {
    spec.name: spec
    for spec in [
        # Client & family
        _spec("spouse_name", "Spouse Name", FieldKind.TEXT, FieldGroup.HOUSEHOLD),
        _spec("address", "Street Address", FieldKind.TEXT, FieldGroup.HOUSEHOLD),
        _spec("city", "City", FieldKind.TEXT, FieldGroup.HOUSEHOLD),
        _spec("state", "State", FieldKind.TEXT, FieldGroup.HOUSEHOLD),
        _spec("zip_code", "ZIP Code", FieldKind.TEXT, FieldGroup.HOUSEHOLD),
        _spec("more_children_planned", "Plan to have more children?", FieldKind.YES_NO, FieldGroup.FAMILY),
        _spec("more_children_count", "How many more children?", FieldKind.INTEGER, FieldGroup.FAMILY),
        # Goals & properties
        _spec("goals_text", "Financial goals (5-10 years)", FieldKind.TEXTAREA, FieldGroup.GOALS),
        _spec("own_or_rent", "Own or Rent?", FieldKind.TEXT, FieldGroup.GOALS),
        _spec("properties_notes", "Property notes", FieldKind.TEXTAREA, FieldGroup.GOALS),
        # Assets
        _spec("has_old_401k", "401k from previous employer?", FieldKind.YES_NO, FieldGroup.ASSETS),
        _spec("expects_lump_sum", "Expect lump sums/inheritance?", FieldKind.YES_NO, FieldGroup.ASSETS),
        # Insurance need inputs
        _spec("li_debt", "Debt to cover ($)", FieldKind.CURRENCY, FieldGroup.INSURANCE),
        _spec("li_income", "Income replacement ($)", FieldKind.CURRENCY, FieldGroup.INSURANCE),
        _spec("li_mortgage", "Mortgage ($)", FieldKind.CURRENCY, FieldGroup.INSURANCE),
        _spec("li_education", "Education ($)", FieldKind.CURRENCY, FieldGroup.INSURANCE),
        _spec("li_insurance_in_place", "Current insurance ($)", FieldKind.CURRENCY, FieldGroup.INSURANCE),
        # Income & retirement
        _spec("retirement_monthly_need", "Monthly retirement need ($)", FieldKind.CURRENCY, FieldGroup.INCOME),
        _spec("monthly_commitment", "Monthly commitment ($)", FieldKind.CURRENCY, FieldGroup.INCOME),
        _spec("next_appointment_date", "Next appt date", FieldKind.DATE, FieldGroup.INCOME),
        _spec("next_appointment_time", "Next appt time", FieldKind.TIME, FieldGroup.INCOME),
    ]
}

NUMERIC_FIELDS: tuple[str, ...] = tuple(
    name for name, spec in FNA_FIELDS.items() if spec.is_numeric
)


def fields_in_group(group: FieldGroup) -> list[FieldSpec]:
    return [spec for spec in FNA_FIELDS.values() if spec.group == group]


def blank_draft() -> dict[str, Any]:
    """Form values for a header with nothing filled in."""
    return {
        name: "" if spec.kind in (FieldKind.TEXT, FieldKind.TEXTAREA) else None
        for name, spec in FNA_FIELDS.items()
    }


# =============================================================================
# FIELD GROUPS
# =============================================================================

class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)


class HouseholdSection(_Section):
    """Identity and household address."""

    spouse_name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

    @field_validator('spouse_name', 'address', 'city', 'state', 'zip_code', mode='before')
    @classmethod
    def text_fields(cls, v):
        return coerce_text(v)


class FamilyPlanningSection(_Section):
    """Plans for more children."""

    more_children_planned: Optional[bool] = Field(
        default=None,
        description="Tri-state: yes / no / unknown"
    )
    more_children_count: Optional[int] = None

    @field_validator('more_children_planned', mode='before')
    @classmethod
    def tri_state(cls, v):
        return coerce_tri_state(v)

    @field_validator('more_children_count', mode='before')
    @classmethod
    def count(cls, v):
        return coerce_count(v)


class GoalsSection(_Section):
    """Goals narrative and housing."""

    goals_text: str = ""
    own_or_rent: str = ""
    properties_notes: str = ""

    @field_validator('goals_text', 'own_or_rent', 'properties_notes', mode='before')
    @classmethod
    def text_fields(cls, v):
        return coerce_text(v)


class AssetsSection(_Section):
    """Asset flags."""

    has_old_401k: Optional[bool] = None
    expects_lump_sum: Optional[bool] = None

    @field_validator('has_old_401k', 'expects_lump_sum', mode='before')
    @classmethod
    def tri_state(cls, v):
        return coerce_tri_state(v)


class InsuranceNeedsSection(_Section):
    """Inputs to a life-insurance need estimate. Nothing is computed from them here."""

    li_debt: Optional[Decimal] = None
    li_income: Optional[Decimal] = None
    li_mortgage: Optional[Decimal] = None
    li_education: Optional[Decimal] = None
    li_insurance_in_place: Optional[Decimal] = None

    @field_validator(
        'li_debt', 'li_income', 'li_mortgage', 'li_education', 'li_insurance_in_place',
        mode='before',
    )
    @classmethod
    def amounts(cls, v):
        return coerce_amount(v)

    @field_serializer(
        'li_debt', 'li_income', 'li_mortgage', 'li_education', 'li_insurance_in_place',
        when_used='json',
    )
    def amounts_to_json(self, v: Optional[Decimal]) -> Optional[float]:
        return _number_to_json(v)


class IncomeRetirementSection(_Section):
    """Retirement needs and the next appointment."""

    retirement_monthly_need: Optional[Decimal] = None
    monthly_commitment: Optional[Decimal] = None
    next_appointment_date: Optional[date] = None
    next_appointment_time: Optional[time] = None

    @field_validator('retirement_monthly_need', 'monthly_commitment', mode='before')
    @classmethod
    def amounts(cls, v):
        return coerce_amount(v)

    @field_validator('next_appointment_date', 'next_appointment_time', mode='before')
    @classmethod
    def blank_dates(cls, v):
        return blank_to_none(v)

    @field_serializer('retirement_monthly_need', 'monthly_commitment', when_used='json')
    def amounts_to_json(self, v: Optional[Decimal]) -> Optional[float]:
        return _number_to_json(v)



# =============================================================================
# FNA HEADER
# =============================================================================

class FnaHeader(BaseModel):
    """
    One FNA header (row of `fna_header`).

    Created the first time a client is selected, updated in place by
    every save, never deleted by this system.
    """

    id: str = Field(
        ...,
        description="Identity assigned by the backend"
    )
    client_id: str = Field(
        ...,
        description="Client this analysis belongs to"
    )

    household: HouseholdSection = Field(default_factory=HouseholdSection)
    family: FamilyPlanningSection = Field(default_factory=FamilyPlanningSection)
    goals: GoalsSection = Field(default_factory=GoalsSection)
    assets: AssetsSection = Field(default_factory=AssetsSection)
    insurance: InsuranceNeedsSection = Field(default_factory=InsuranceNeedsSection)
    income: IncomeRetirementSection = Field(default_factory=IncomeRetirementSection)

    updated_at: Optional[datetime] = Field(
        default=None,
        description="Set on every save"
    )

    @field_validator('id', 'client_id', mode='before')
    @classmethod
    def stringify_ids(cls, v):
        return str(v) if v is not None else v

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "FnaHeader":
        """Build a header from a flat backend row."""
        data: dict[str, Any] = {
            "id": row.get("id"),
            "client_id": row.get("client_id"),
            "updated_at": row.get("updated_at"),
        }
        for group in FieldGroup:
            data[group.value] = {
                spec.name: row[spec.name]
                for spec in fields_in_group(group)
                if spec.name in row
            }
        return cls.model_validate(data)

    @classmethod
    def from_draft(
        cls,
        header_id: str,
        client_id: str,
        draft: dict[str, Any],
        updated_at: Optional[datetime] = None,
    ) -> "FnaHeader":
        """
        Build a header from raw form values.

        This is where coercion happens.

        Raises:
            ValidationError: if any value breaks a field group's invariants
        """
        data: dict[str, Any] = {
            "id": header_id,
            "client_id": client_id,
            "updated_at": updated_at,
        }
        for group in FieldGroup:
            data[group.value] = {
                spec.name: draft.get(spec.name)
                for spec in fields_in_group(group)
            }
        return cls.model_validate(data)

    def get(self, name: str) -> Any:
        spec = FNA_FIELDS[name]
        return getattr(getattr(self, spec.group.value), name)

    def to_draft(self) -> dict[str, Any]:
        """Flat field -> value mapping for the form."""
        return {name: self.get(name) for name in FNA_FIELDS}

    def to_row(self) -> dict[str, Any]:
        """
        Flat JSON-safe payload for a full-row update.

        Identity columns are not included; the update is keyed by id.
        """
        row: dict[str, Any] = {}
        for group in FieldGroup:
            row.update(getattr(self, group.value).model_dump(mode="json"))
        row["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return row


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def describe_validation_error(exc: ValidationError) -> str:
    """
    Turn a pydantic error into one line a user can act on.

    e.g. "Debt to cover ($): 'abc' is not a number"
    """
    parts = []
    for error in exc.errors():
        name = str(error["loc"][-1]) if error["loc"] else ""
        label = FNA_FIELDS[name].label if name in FNA_FIELDS else name
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{label}: {message}" if label else message)
    return "; ".join(parts)


class SaveResult(BaseModel):
    """
    Outcome of one save.

    On failure the message is the backend's (or validator's) message,
    passed through verbatim.
    """

    success: bool
    message: str
    saved_at: Optional[datetime] = None
