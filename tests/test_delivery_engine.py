"""
Test Suite: Delivery Strategy Engine

Verifies:
1. Not installed → NOT_APPLICABLE with zero launches
2. First accepted attempt wins, later tiers untouched
3. Transport failures only fail their own attempt
4. Same world → same outcome
"""

from launcher.config import DEEP_LINK_SCHEMES
from launcher.delivery import DeliveryStrategyEngine
from launcher.host import FakeRegistry, RecordingChannel
from launcher.models import AttemptFailed, Delivered, Outcome, PaymentPayload, RawPayload, Tier
from launcher.projector import PayloadProjector

QR = "00020101021238570010A000000727"


def make_engine(registry, channel):
    return DeliveryStrategyEngine(registry, channel, PayloadProjector(schemes=DEEP_LINK_SCHEMES))


class TestDeliveryStrategyEngine:

    def test_not_installed_makes_no_launch_attempt(self):
        registry = FakeRegistry(installed=set())
        channel = RecordingChannel()
        outcome = make_engine(registry, channel).attempt_delivery("com.bank.x", PaymentPayload(amount="1"), QR)
        assert outcome == Outcome.NOT_APPLICABLE
        assert channel.deliveries == []
        # installation is checked once, nothing else is asked
        assert registry.queries == [("installed", "com.bank.x")]

    def test_second_scheme_wins_and_stops_search(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["napas://"]})
        channel = RecordingChannel()
        outcome, results = make_engine(registry, channel).search(
            "com.bank.x", PaymentPayload(accountNumber="123"), QR
        )
        assert outcome == Outcome.DELIVERED
        assert len(channel.deliveries) == 1
        app_id, attempt = channel.deliveries[0]
        assert app_id == "com.bank.x"
        assert attempt.label == "napas"
        assert attempt.uri.startswith("napas://transfer?qr=")
        assert isinstance(results[0], AttemptFailed)
        assert isinstance(results[1], Delivered)
        assert len(results) == 2

    def test_data_uri_tier_used_when_no_deep_link_resolves(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["bankqr://"]})
        channel = RecordingChannel()
        outcome = make_engine(registry, channel).attempt_delivery(
            "com.bank.x", PaymentPayload(accountNumber="123"), QR
        )
        assert outcome == Outcome.DELIVERED
        _, attempt = channel.deliveries[0]
        assert attempt.tier == Tier.DATA_URI
        assert ("stk", "123") in attempt.extras

    def test_launch_with_extras_is_final_fallback(self):
        registry = FakeRegistry(installed={"com.bank.x"})
        channel = RecordingChannel()
        outcome = make_engine(registry, channel).attempt_delivery(
            "com.bank.x", PaymentPayload(amount="5000"), QR
        )
        assert outcome == Outcome.DELIVERED
        _, attempt = channel.deliveries[0]
        assert attempt.tier == Tier.LAUNCH_EXTRAS
        assert attempt.extras_dict()["money"] == "5000"

    def test_transport_failure_continues_to_next_attempt(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["vietqr://", "napas://"]})
        channel = RecordingChannel(fail_prefixes=["vietqr://"])
        outcome, results = make_engine(registry, channel).search("com.bank.x", None, QR)
        assert outcome == Outcome.DELIVERED
        assert isinstance(results[0], AttemptFailed)
        assert results[0].reason.startswith("transport")
        assert channel.deliveries[0][1].label == "napas"

    def test_every_attempt_failing_is_not_applicable(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["tpbank://"]})
        channel = RecordingChannel(fail_prefixes=["tpbank://"], fail_launch=True)
        outcome, results = make_engine(registry, channel).search("com.bank.x", None, QR)
        assert outcome == Outcome.NOT_APPLICABLE
        assert len(results) == 7
        assert all(isinstance(r, AttemptFailed) for r in results)

    def test_rejected_hand_off_is_a_failed_attempt(self):
        registry = FakeRegistry(installed={"com.bank.x"})
        channel = RecordingChannel(accept=False)
        outcome, results = make_engine(registry, channel).search("com.bank.x", None, None)
        assert outcome == Outcome.NOT_APPLICABLE
        assert results[-1].reason == "rejected"

    def test_same_world_same_outcome(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["bank://"]})
        engine = make_engine(registry, RecordingChannel())
        payload = PaymentPayload(accountNumber="123")
        first = engine.attempt_delivery("com.bank.x", payload, QR)
        second = engine.attempt_delivery("com.bank.x", payload, QR)
        assert first == second == Outcome.DELIVERED

    def test_deliver_raw_payload(self):
        registry = FakeRegistry(installed={"com.bank.x"}, resolvable={"com.bank.x": ["bankqr://"]})
        channel = RecordingChannel()
        raw = RawPayload(code=QR, payment=PaymentPayload(accountNumber="123"))
        assert make_engine(registry, channel).deliver("com.bank.x", raw) == Outcome.DELIVERED
        _, attempt = channel.deliveries[0]
        assert attempt.tier == Tier.DATA_URI
        assert ("receiver_account", "123") in attempt.extras
