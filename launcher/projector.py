"""
Payload Projector

Responsibility: turn one decoded QR payment payload (plus the raw QR string)
into the ordered list of delivery attempts for a single banking app.

Tiers, in this order and never reordered:
1. Deep link  → <scheme>://transfer?qr=<encoded>, one per configured scheme
2. Data URI   → bankqr://data?qr=<encoded> with the data-URI alias extras
3. Launch     → plain launch handle with every launch alias + raw code keys

Tiers 1 and 2 need the raw QR string. Tier 3 is always produced, even with
nothing to attach.

Does NOT:
- Talk to the registry or the channel (DeliveryStrategyEngine does)
- Decode QR strings
"""

import logging
from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote

from launcher.alias_table import (
    DATA_URI_ALIASES,
    DATA_URI_QR_KEYS,
    LAUNCH_ALIASES,
    LAUNCH_QR_KEYS,
    aliases_for,
)
from launcher.config import Config, get_config
from launcher.models import DeliveryAttempt, PaymentPayload, Tier

logger = logging.getLogger("LAUNCHER.Projector")

# Same reserved set as Android's Uri.encode
_URI_SAFE = "!~'()*"


def encode_qr(raw_code: str) -> str:
    return quote(raw_code, safe=_URI_SAFE)


def _expand(
    payload: Optional[PaymentPayload],
    raw_code: Optional[str],
    qr_keys: Iterable[str],
    alias_table: dict,
) -> Tuple[Tuple[str, str], ...]:
    extras: List[Tuple[str, str]] = []
    if raw_code is not None:
        extras.extend((key, raw_code) for key in qr_keys)
    if payload is not None:
        for field_name, value in payload.present_fields():
            extras.extend((key, value) for key in aliases_for(alias_table, field_name))
    return tuple(extras)


class PayloadProjector:
    """Builds DeliveryAttempt sequences. Stateless; safe to share."""

    def __init__(
        self,
        schemes: Optional[List[str]] = None,
        deep_link_template: str = "{scheme}://transfer?qr={qr}",
        data_uri: str = "bankqr://data?qr={qr}",
        content_uri: Optional[str] = "content://qr?data={qr}",
    ):
        self.schemes = list(schemes) if schemes is not None else []
        self.deep_link_template = deep_link_template
        self.data_uri = data_uri
        self.content_uri = content_uri

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "PayloadProjector":
        config = config or get_config()
        return cls(
            schemes=config.get("delivery.deep_link_schemes", []),
            deep_link_template=config.get("delivery.deep_link_template"),
            data_uri=config.get("delivery.data_uri"),
            content_uri=config.get("delivery.content_uri"),
        )

    def project(self, payload: Optional[PaymentPayload], raw_code: Optional[str]) -> List[DeliveryAttempt]:
        attempts = self.deep_link_attempts(raw_code)
        data_attempt = self.data_uri_attempt(payload, raw_code)
        if data_attempt is not None:
            attempts.append(data_attempt)
        attempts.append(self.launch_attempt(payload, raw_code))
        logger.debug("[PROJECT] attempts=%d raw=%s", len(attempts), raw_code is not None)
        return attempts

    # 1) Deep link tier
    def deep_link_attempts(self, raw_code: Optional[str]) -> List[DeliveryAttempt]:
        if raw_code is None:
            return []
        encoded = encode_qr(raw_code)
        return [
            DeliveryAttempt(
                tier=Tier.DEEP_LINK,
                uri=self.deep_link_template.format(scheme=scheme, qr=encoded),
                label=scheme,
            )
            for scheme in self.schemes
        ]

    # 2) Data URI tier
    def data_uri_attempt(
        self, payload: Optional[PaymentPayload], raw_code: Optional[str]
    ) -> Optional[DeliveryAttempt]:
        if raw_code is None:
            return None
        return DeliveryAttempt(
            tier=Tier.DATA_URI,
            uri=self.data_uri.format(qr=encode_qr(raw_code)),
            extras=_expand(payload, raw_code, DATA_URI_QR_KEYS, DATA_URI_ALIASES),
            label="data_uri",
        )

    # 3) Launch-with-extras tier
    def launch_attempt(self, payload: Optional[PaymentPayload], raw_code: Optional[str]) -> DeliveryAttempt:
        data_uri = None
        if raw_code is not None and self.content_uri:
            data_uri = self.content_uri.format(qr=encode_qr(raw_code))
        return DeliveryAttempt(
            tier=Tier.LAUNCH_EXTRAS,
            extras=_expand(payload, raw_code, LAUNCH_QR_KEYS, LAUNCH_ALIASES),
            data_uri=data_uri,
            label="launch_extras",
        )
