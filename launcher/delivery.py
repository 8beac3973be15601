"""
Delivery Strategy Engine

Responsibility: deliver a QR payment payload to ONE target app by walking the
projected attempts in order and stopping at the first one the app accepts.

Design:
- Installation is checked once, before any attempt. Not installed →
  NOT_APPLICABLE with zero launches.
- URI attempts are resolve-checked against the target first; unresolved
  attempts are skipped without touching the channel.
- The launch-with-extras attempt has no URI and is handed over directly.
- Every attempt yields Delivered or AttemptFailed. A channel exception is
  logged and becomes AttemptFailed; it never ends the search.
- No retries. The tiers are the retry policy.

Does NOT:
- Build attempts (PayloadProjector does)
- Watch what the receiving app does after the hand-off
"""

import logging
from typing import List, Optional, Tuple

from launcher.host import ApplicationRegistry, LaunchChannel
from launcher.models import (
    AttemptFailed,
    AttemptResult,
    Delivered,
    DeliveryAttempt,
    Outcome,
    PaymentPayload,
    RawPayload,
)
from launcher.projector import PayloadProjector

logger = logging.getLogger("LAUNCHER.Delivery")


class DeliveryStrategyEngine:

    def __init__(
        self,
        registry: ApplicationRegistry,
        channel: LaunchChannel,
        projector: Optional[PayloadProjector] = None,
    ):
        self.registry = registry
        self.channel = channel
        self.projector = projector or PayloadProjector.from_config()

    def attempt_delivery(
        self,
        target: str,
        payload: Optional[PaymentPayload],
        raw_code: Optional[str],
    ) -> Outcome:
        outcome, _ = self.search(target, payload, raw_code)
        return outcome

    def deliver(self, target: str, raw: RawPayload) -> Outcome:
        return self.attempt_delivery(target, raw.payment, raw.code)

    def search(
        self,
        target: str,
        payload: Optional[PaymentPayload],
        raw_code: Optional[str],
    ) -> Tuple[Outcome, List[AttemptResult]]:
        """Run the strategy search. Returns the outcome and every attempt result in order."""
        if not self.registry.is_installed(target):
            logger.info("[DELIVERY] result=not_installed app=%s", target)
            return Outcome.NOT_APPLICABLE, []

        results: List[AttemptResult] = []
        for attempt in self.projector.project(payload, raw_code):
            result = self.try_attempt(target, attempt)
            results.append(result)
            if isinstance(result, Delivered):
                logger.info(
                    "[DELIVERY] result=delivered app=%s tier=%s via=%s",
                    target,
                    attempt.tier.value,
                    attempt.label,
                )
                return Outcome.DELIVERED, results

        logger.warning("[DELIVERY] result=exhausted app=%s attempts=%d", target, len(results))
        return Outcome.NOT_APPLICABLE, results

    def try_attempt(self, target: str, attempt: DeliveryAttempt) -> AttemptResult:
        try:
            if attempt.needs_resolve and not self.registry.can_resolve(target, attempt.uri):
                logger.debug("[DELIVERY] skip=unresolved app=%s via=%s", target, attempt.label)
                return AttemptFailed(attempt, "unresolved")
            accepted = self.channel.deliver(target, attempt)
        except Exception as e:
            logger.warning("[DELIVERY] attempt_failed app=%s via=%s error=%s", target, attempt.label, e)
            return AttemptFailed(attempt, f"transport: {e}")
        if not accepted:
            return AttemptFailed(attempt, "rejected")
        return Delivered(attempt)
