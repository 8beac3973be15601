"""
Request-scoped value types for the launcher.

Nothing here is persisted. Every instance is created for one dispatch call
and dropped when the call returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from launcher.alias_table import PAYMENT_FIELDS


class Outcome(str, Enum):
    """Result of every public launcher operation."""
    DELIVERED = "delivered"
    NOT_APPLICABLE = "not-applicable"
    CHOOSER_SHOWN = "chooser-shown"

    def as_bool(self) -> bool:
        # Legacy callers only see a boolean.
        return self is not Outcome.NOT_APPLICABLE


class Tier(Enum):
    """Delivery strategy tiers, most specific first."""
    DEEP_LINK = "deep_link"
    DATA_URI = "data_uri"
    LAUNCH_EXTRAS = "launch_extras"
    VIEW = "view"  # plain URL hand-off, not part of the QR search


@dataclass(frozen=True)
class PaymentPayload:
    bin: Optional[str] = None
    accountNumber: Optional[str] = None
    amount: Optional[str] = None
    addInfo: Optional[str] = None
    bankName: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["PaymentPayload"]:
        """Build from a decoded qrData map. Unknown keys are ignored, values stringified."""
        if data is None:
            return None
        values = {}
        for name in PAYMENT_FIELDS:
            raw = data.get(name)
            if raw is not None:
                values[name] = str(raw)
        return cls(**values)

    def present_fields(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(
            (name, getattr(self, name))
            for name in PAYMENT_FIELDS
            if getattr(self, name) is not None
        )


@dataclass(frozen=True)
class RawPayload:
    """Encoded QR string with the payload it decoded to, or plain text."""
    code: Optional[str] = None
    payment: Optional[PaymentPayload] = None


@dataclass(frozen=True)
class DeliveryAttempt:
    """
    One way of handing a payload to one application.

    uri is None for the launch-with-extras tier: the app's plain launch
    handle is used and no resolve-check is made. data_uri is an optional
    best-effort URI attached to that launch.
    """
    tier: Tier
    uri: Optional[str] = None
    extras: Tuple[Tuple[str, str], ...] = ()
    data_uri: Optional[str] = None
    label: str = ""

    @property
    def needs_resolve(self) -> bool:
        return self.uri is not None

    def extras_dict(self) -> dict:
        return dict(self.extras)


# ============================================================================
# Per-attempt results
# ============================================================================
@dataclass(frozen=True)
class Delivered:
    attempt: DeliveryAttempt


@dataclass(frozen=True)
class AttemptFailed:
    attempt: DeliveryAttempt
    reason: str


AttemptResult = Union[Delivered, AttemptFailed]


@dataclass(frozen=True)
class ChooserPresentation:
    """What the host is asked to show: primary target first, then the rest."""
    title: str
    primary: Optional[str] = None
    secondary: Tuple[str, ...] = ()
    uri: Optional[str] = None
    extras: Tuple[Tuple[str, str], ...] = ()
    generic: bool = False

    @property
    def order(self) -> Tuple[str, ...]:
        if self.primary is None:
            return ()
        return (self.primary,) + self.secondary


@dataclass(frozen=True)
class ChooserResult:
    outcome: Outcome
    order: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def primary(self) -> Optional[str]:
        return self.order[0] if self.order else None

    @property
    def secondary(self) -> Tuple[str, ...]:
        return self.order[1:]
