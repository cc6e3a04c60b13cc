"""
Client and Dashboard Models

These are read-only projections of rows owned by other systems.
Clients are registered elsewhere; FNA sessions are listed on the
dashboard but never edited here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Client(BaseModel):
    """
    A registered client (row of `clientregistrations`).

    Immutable from this system's perspective.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque stable identifier"
    )
    firstname: str = Field(default="")
    lastname: str = Field(default="")
    phone: str = Field(default="")
    email: Optional[str] = None
    createdat: Optional[datetime] = Field(
        default=None,
        description="Registration time (used for ordering)"
    )

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        """Backends hand out UUIDs or integers; we only ever compare them."""
        return str(v) if v is not None else v

    @field_validator('firstname', 'lastname', 'phone', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('email', mode='before')
    @classmethod
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def display_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()

    @property
    def email_display(self) -> str:
        return self.email or "-"

    def matches(self, query: str) -> bool:
        """
        Case-insensitive substring match on first name, last name or phone.

        An empty query matches every client.
        """
        q = query.strip().lower()
        if not q:
            return True
        return (
            q in self.firstname.lower()
            or q in self.lastname.lower()
            or q in self.phone.lower()
        )


class FnaSession(BaseModel):
    """
    Dashboard row (`fna_sessions`).

    Used only for listing and sorting.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    created_at: datetime
    household_income: Optional[Decimal] = None
    dependents: Optional[int] = None

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        return str(v) if v is not None else v

    @property
    def income_display(self) -> str:
        if self.household_income is None:
            return "-"
        return f"${self.household_income:,.0f}"

    @property
    def dependents_display(self) -> str:
        return "-" if self.dependents is None else str(self.dependents)
