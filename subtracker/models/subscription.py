"""
Core Data Models for Subscription Tracker

These models define the schemas for subscription records coming from
(and going to) the external store.

DESIGN DECISION: Records are decoded ONCE, at the store boundary.
Everything past that point works with typed, immutable values, so the
renewal calculator never has to second-guess a string date or price.

Wire format is camelCase JSON (renewalType, startDate, ...). Python code
uses snake_case; pydantic aliases translate between the two.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class RenewalType(str, Enum):
    """
    Renewal cadence of a subscription.

    The store historically used the Portuguese labels "mensal" and
    "anual"; both are accepted when parsing (see `parse`).
    """
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: Any) -> "RenewalType":
        """Parse a cadence from its value or a known store alias."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _RENEWAL_ALIASES.get(normalized, normalized)
        return cls(normalized)


_RENEWAL_ALIASES = {
    "mensal": "monthly",
    "anual": "yearly",
}


# =============================================================================
# NOTIFICATION MODELS
# =============================================================================

class RenewalNotice(BaseModel):
    """An upcoming renewal that should be surfaced to the user."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    urgent: bool
    days_until: int = Field(
        ...,
        validation_alias=AliasChoices("daysUntil", "days_until", "days"),
        description="Whole days until the renewal (partial days round up)",
    )


class PrecomputedNotification(BaseModel):
    """Notice computed by the store; used verbatim."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["precomputed"] = "precomputed"
    notice: RenewalNotice


class DerivedNotification(BaseModel):
    """Notice is derived client-side from start date and cadence."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["derived"] = "derived"


NotificationSource = Annotated[
    Union[PrecomputedNotification, DerivedNotification],
    Field(discriminator="kind"),
]


# =============================================================================
# SUBSCRIPTION MODELS
# =============================================================================

# Limits the store accepts for free-text fields
FIELD_MAX_LENGTHS = {
    "name": 200,
    "category": 100,
    "description": 1000,
}


class SubscriptionDraft(BaseModel):
    """
    Payload for creating or updating a subscription.

    Produced by SubscriptionValidator from form input; every field the
    store requires is present and already typed.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(..., min_length=1, max_length=FIELD_MAX_LENGTHS["name"])
    category: str = Field(..., min_length=1, max_length=FIELD_MAX_LENGTHS["category"])
    description: str = Field(default="", max_length=FIELD_MAX_LENGTHS["description"])
    price: Decimal = Field(..., ge=0, decimal_places=2)
    renewal_type: RenewalType
    start_date: date

    def to_wire(self) -> dict:
        """Serialize to the store's JSON body."""
        return {
            "name": self.name,
            "price": float(self.price),
            "renewalType": self.renewal_type.value,
            "startDate": self.start_date.isoformat(),
            "description": self.description,
            "category": self.category,
        }


class Subscription(BaseModel):
    """
    A subscription record as held by the store.

    CRITICAL: Instances are immutable. The core only derives values
    from them; edits go through a SubscriptionDraft and the store.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., min_length=1, description="Opaque store identifier")
    name: str
    category: str = ""
    description: str = ""
    price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Price per cadence period; None when the store omits it",
    )
    renewal_type: RenewalType
    start_date: Optional[date] = Field(
        default=None,
        description="First billing date",
    )
    notification: NotificationSource = Field(default_factory=DerivedNotification)
    next_renewal: Optional[date] = Field(
        default=None,
        description="Display-only next renewal supplied by the store",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Store ids may be numeric; keep them opaque strings."""
        return str(v)

    @field_validator("description", "category", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("renewal_type", mode="before")
    @classmethod
    def parse_renewal_type(cls, v: Any) -> RenewalType:
        return RenewalType.parse(v)

    @field_validator("start_date", "next_renewal", mode="before")
    @classmethod
    def empty_date_to_none(cls, v: Any) -> Any:
        """Blank strings from form-backed stores mean "unset"."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            # Stores sometimes send full ISO timestamps
            return v[:10]
        return v

    @model_validator(mode="before")
    @classmethod
    def tag_notification(cls, data: Any) -> Any:
        """
        Turn the store's optional `notification` object into the
        explicit precomputed/derived choice.
        """
        if not isinstance(data, dict):
            return data
        raw = data.get("notification")
        if raw is None or raw is False:
            data = {**data, "notification": DerivedNotification()}
        elif isinstance(raw, dict) and "kind" not in raw:
            try:
                source = PrecomputedNotification(
                    notice=RenewalNotice.model_validate(raw)
                )
            except ValidationError:
                # Empty or partial notice: derive it client-side instead
                source = DerivedNotification()
            data = {**data, "notification": source}
        return data

    @property
    def has_precomputed_notice(self) -> bool:
        return isinstance(self.notification, PrecomputedNotification)

    def to_draft(self) -> SubscriptionDraft:
        """
        Build an edit payload from this record.

        Raises ValueError when the record lacks a field the store
        requires for writes (price or start date).
        """
        return SubscriptionDraft(
            name=self.name,
            category=self.category,
            description=self.description,
            price=self.price,
            renewal_type=self.renewal_type,
            start_date=self.start_date,
        )
