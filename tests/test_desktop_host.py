"""
Desktop host: PATH-based registry, Popen launches, PowerShell clipboard.
No real processes are started.
"""

import subprocess

import pytest

from launcher.desktop_host import (
    DesktopClipboard,
    DesktopLaunchChannel,
    DesktopRegistry,
    create_desktop_facade,
)
from launcher.host import ClipboardError, TransportError
from launcher.models import ChooserPresentation, DeliveryAttempt, Outcome, Tier

APPS = {
    "edge": {"launch": "msedge.exe", "display": "Microsoft Edge", "schemes": ["http", "https"]},
    "tpbank": {"launch": "tpbank.exe", "display": "TPBank", "schemes": ["tpbank", "bankqr"]},
    "ghost": {"launch": "ghost.exe", "display": "Ghost", "schemes": ["https"]},
    "nolaunch": {"display": "No Launch"},
}


class FakePopen:
    calls = []

    def __init__(self, args, **kwargs):
        FakePopen.calls.append((args, kwargs))


@pytest.fixture(autouse=True)
def fake_system(monkeypatch):
    installed = {"msedge.exe", "tpbank.exe"}
    monkeypatch.setattr(
        "launcher.desktop_host.shutil.which",
        lambda name: f"C:\\Apps\\{name}" if name in installed else None,
    )
    FakePopen.calls = []
    monkeypatch.setattr("launcher.desktop_host.subprocess.Popen", FakePopen)


@pytest.fixture
def registry():
    return DesktopRegistry(APPS)


def test_installed_follows_path(registry):
    assert registry.is_installed("edge")
    assert not registry.is_installed("ghost")
    assert not registry.is_installed("nolaunch")
    assert not registry.is_installed("unknown")
    assert registry.has_launch_handle("tpbank")


def test_resolve_by_scheme(registry):
    assert registry.can_resolve("edge", "https://x")
    assert registry.can_resolve("tpbank", "TPBANK://transfer?qr=1")
    assert not registry.can_resolve("edge", "tpbank://transfer?qr=1")
    assert not registry.can_resolve("ghost", "https://x")
    assert not registry.can_resolve("edge", "no-scheme-here")


def test_deliver_passes_uri_and_extras(registry):
    channel = DesktopLaunchChannel(registry, env_prefix="LAUNCH_EXTRA_")
    attempt = DeliveryAttempt(
        tier=Tier.DATA_URI,
        uri="bankqr://data?qr=abc",
        extras=(("qr_code", "abc"), ("com.bank.qr_code", "abc"), ("stk", "123")),
    )
    assert channel.deliver("tpbank", attempt) is True
    args, kwargs = FakePopen.calls[0]
    assert args == ["C:\\Apps\\tpbank.exe", "bankqr://data?qr=abc"]
    env = kwargs["env"]
    assert env["LAUNCH_EXTRA_QR_CODE"] == "abc"
    assert env["LAUNCH_EXTRA_COM_BANK_QR_CODE"] == "abc"
    assert env["LAUNCH_EXTRA_STK"] == "123"


def test_plain_launch_uses_data_uri_when_present(registry):
    channel = DesktopLaunchChannel(registry)
    channel.deliver("tpbank", DeliveryAttempt(tier=Tier.LAUNCH_EXTRAS, data_uri="content://qr?data=1"))
    channel.deliver("tpbank", DeliveryAttempt(tier=Tier.LAUNCH_EXTRAS))
    assert FakePopen.calls[0][0] == ["C:\\Apps\\tpbank.exe", "content://qr?data=1"]
    assert FakePopen.calls[1][0] == ["C:\\Apps\\tpbank.exe"]


def test_deliver_to_missing_app_is_rejected(registry):
    channel = DesktopLaunchChannel(registry)
    assert channel.deliver("ghost", DeliveryAttempt(tier=Tier.LAUNCH_EXTRAS)) is False
    assert FakePopen.calls == []


def test_popen_failure_is_transport_error(registry, monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("access denied")

    monkeypatch.setattr("launcher.desktop_host.subprocess.Popen", broken)
    channel = DesktopLaunchChannel(registry)
    with pytest.raises(TransportError):
        channel.deliver("edge", DeliveryAttempt(tier=Tier.VIEW, uri="https://x"))
    assert channel.present_generic_chooser("https://x", "Pick") is False


def test_chooser_script_lists_candidates_in_order(registry):
    channel = DesktopLaunchChannel(registry)
    presentation = ChooserPresentation(
        title="Bob's apps",
        primary="tpbank",
        secondary=("edge",),
        extras=(("qr_code", "abc"),),
    )
    assert channel.present_chooser(presentation) is True
    args, kwargs = FakePopen.calls[0]
    assert args[:3] == ["powershell", "-NoProfile", "-Command"]
    script = args[3]
    assert "Out-GridView -Title 'Bob''s apps'" in script
    assert script.index("TPBank") < script.index("Microsoft Edge")
    assert kwargs["env"]["LAUNCH_EXTRA_QR_CODE"] == "abc"


def test_chooser_with_no_launchable_candidates(registry):
    channel = DesktopLaunchChannel(registry)
    assert channel.present_chooser(ChooserPresentation(title="x", primary="ghost")) is False
    assert FakePopen.calls == []


def test_share_text_opens_with_dialog(registry, tmp_path):
    channel = DesktopLaunchChannel(registry, share_dir=str(tmp_path))
    assert channel.share_text("hello", "Share", subject="note") is True
    args, _ = FakePopen.calls[0]
    assert args[:2] == ["rundll32", "shell32.dll,OpenAs_RunDLL"]
    with open(args[2], encoding="utf-8") as f:
        assert f.read() == "note\n\nhello"


def test_share_text_reuses_one_file(registry, tmp_path):
    channel = DesktopLaunchChannel(registry, share_dir=str(tmp_path))
    channel.share_text("first", "Share")
    channel.share_text("second", "Share")
    assert FakePopen.calls[0][0][2] == FakePopen.calls[1][0][2]
    assert [p.name for p in tmp_path.iterdir()] == ["launcher_share.txt"]
    assert (tmp_path / "launcher_share.txt").read_text(encoding="utf-8") == "second"


def test_generic_chooser_hands_url_over_as_one_argument(registry):
    channel = DesktopLaunchChannel(registry)
    url = "https://pay.example.com/?a=1&b=%20"
    assert channel.present_generic_chooser(url, "Pick") is True
    assert FakePopen.calls[0][0] == ["rundll32", "url.dll,FileProtocolHandler", url]


class TestDesktopClipboard:

    def test_set_text(self, monkeypatch):
        seen = {}

        def fake_run(args, **kwargs):
            seen["args"] = args
            seen["input"] = kwargs.get("input")
            return subprocess.CompletedProcess(args, 0, "", "")

        monkeypatch.setattr("launcher.desktop_host.subprocess.run", fake_run)
        DesktopClipboard().set_text("000201")
        assert seen["input"] == "000201"
        assert "Set-Clipboard" in seen["args"][-1]

    def test_non_zero_exit_raises(self, monkeypatch):
        monkeypatch.setattr(
            "launcher.desktop_host.subprocess.run",
            lambda args, **kwargs: subprocess.CompletedProcess(args, 1, "", "denied"),
        )
        with pytest.raises(ClipboardError, match="denied"):
            DesktopClipboard().set_text("000201")

    def test_missing_powershell_raises(self, monkeypatch):
        def missing(*args, **kwargs):
            raise FileNotFoundError("powershell")

        monkeypatch.setattr("launcher.desktop_host.subprocess.run", missing)
        with pytest.raises(ClipboardError):
            DesktopClipboard().set_text("000201")


def test_desktop_facade_wires_config(config):
    facade = create_desktop_facade(config)
    # default table lists msedge, which the fake PATH has
    assert facade.launch_app("msedge") == Outcome.DELIVERED
    assert facade.launch_app("firefox") == Outcome.NOT_APPLICABLE
