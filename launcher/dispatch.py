"""
Dispatch Facade

Single entry point for the host UI. Each named operation:
1. validates its fields, presence and type (ValidationError, before any side effect)
2. routes to the delivery engine / chooser builder / host directly
3. returns exactly one Outcome

"Not installed" and "can't handle this" are ordinary NOT_APPLICABLE
outcomes. The only failure that escapes is a clipboard write
(ClipboardError) from copyToClipboard.

handle(method, arguments) is the method-channel view of the same
operations: success(bool) / error(code, message) / not_implemented.
"""

# ============================================================================
# 1) IMPORTS
# ============================================================================
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from launcher.chooser import ChooserBuilder
from launcher.config import Config, get_config
from launcher.delivery import DeliveryStrategyEngine
from launcher.host import ApplicationRegistry, Clipboard, ClipboardError, LaunchChannel
from launcher.models import DeliveryAttempt, Outcome, PaymentPayload, RawPayload, Tier
from launcher.projector import PayloadProjector

logger = logging.getLogger("LAUNCHER.Dispatch")

INVALID_ARGUMENT = "INVALID_ARGUMENT"
CLIPBOARD_ERROR = "CLIPBOARD_ERROR"


# ============================================================================
# 2) ERRORS / RESULTS
# ============================================================================
class ValidationError(Exception):
    """A required request field is missing or has the wrong type."""

    def __init__(self, message: str, fields: Tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.fields = fields


@dataclass(frozen=True)
class ChannelResult:
    status: str  # "success" | "error" | "not_implemented"
    value: Optional[bool] = None
    code: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: bool) -> "ChannelResult":
        return cls("success", value=value)

    @classmethod
    def error(cls, code: str, message: str) -> "ChannelResult":
        return cls("error", code=code, message=message)

    @classmethod
    def not_implemented(cls) -> "ChannelResult":
        return cls("not_implemented")

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        if self.status == "success":
            return {"status": self.status, "result": self.value}
        if self.status == "error":
            return {"status": self.status, "code": self.code, "message": self.message}
        return {"status": self.status}


def _require(message: str, **values: Any) -> None:
    missing = tuple(name for name, value in values.items() if value is None)
    if missing:
        raise ValidationError(message, missing)


def _expect_str(**values: Any) -> None:
    """None is allowed here; presence is _require's job."""
    for name, value in values.items():
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be a string", (name,))


def _expect_str_list(name: str, value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{name} must be a list of strings", (name,))


def _expect_mapping(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, Mapping):
        raise ValidationError(f"{name} must be a map", (name,))


# ============================================================================
# 3) FACADE
# ============================================================================
class DispatchFacade:

    def __init__(
        self,
        registry: ApplicationRegistry,
        channel: LaunchChannel,
        clipboard: Clipboard,
        config: Optional[Config] = None,
        projector: Optional[PayloadProjector] = None,
    ):
        self.config = config or get_config()
        self.registry = registry
        self.channel = channel
        self.clipboard = clipboard
        self.engine = DeliveryStrategyEngine(
            registry, channel, projector or PayloadProjector.from_config(self.config)
        )
        self.choosers = ChooserBuilder(registry, channel)

    # 3.1) launchApp
    def launch_app(self, package_name: Optional[str]) -> Outcome:
        _require("Package name is null", packageName=package_name)
        _expect_str(packageName=package_name)
        if not self.registry.has_launch_handle(package_name):
            logger.warning("[LAUNCH] result=no_launch_handle app=%s", package_name)
            return Outcome.NOT_APPLICABLE
        attempt = DeliveryAttempt(tier=Tier.LAUNCH_EXTRAS, label="launch")
        return self._hand_off("LAUNCH", package_name, attempt)

    # 3.2) openUrlWithBrowser
    def open_url_with_browser(self, url: Optional[str], package_name: Optional[str]) -> Outcome:
        _require("URL or package name is null", url=url, packageName=package_name)
        _expect_str(url=url, packageName=package_name)
        if not self.registry.is_installed(package_name):
            logger.warning("[BROWSER] result=not_installed app=%s", package_name)
            return Outcome.NOT_APPLICABLE
        # No resolve-check: some browsers take URLs they don't advertise.
        attempt = DeliveryAttempt(tier=Tier.VIEW, uri=url, label="browser")
        return self._hand_off("BROWSER", package_name, attempt)

    # 3.3) launchAppWithQR
    def launch_app_with_qr(
        self,
        package_name: Optional[str],
        qr_code: Optional[str] = None,
        qr_data: Optional[Mapping[str, Any]] = None,
    ) -> Outcome:
        _require("Package name is null", packageName=package_name)
        _expect_str(packageName=package_name, qrCode=qr_code)
        _expect_mapping("qrData", qr_data)
        raw = RawPayload(code=qr_code, payment=PaymentPayload.from_mapping(qr_data))
        return self.engine.deliver(package_name, raw)

    # 3.4) copyToClipboard
    def copy_to_clipboard(self, text: Optional[str]) -> Outcome:
        _require("Text is null", text=text)
        _expect_str(text=text)
        try:
            self.clipboard.set_text(text, label="QR Code")
        except ClipboardError:
            logger.error("[CLIPBOARD] result=failed", exc_info=True)
            raise
        except Exception as e:
            logger.error("[CLIPBOARD] result=failed error=%s", e, exc_info=True)
            raise ClipboardError(str(e)) from e
        logger.info("[CLIPBOARD] result=copied text=%s...", text[:50])
        return Outcome.DELIVERED

    # 3.5) showAppChooser
    def show_app_chooser(
        self,
        url: Optional[str],
        package_names: Optional[Iterable[str]],
        title: Optional[str] = None,
    ) -> Outcome:
        _require("URL or package names is null", url=url, packageNames=package_names)
        _expect_str(url=url, title=title)
        _expect_str_list("packageNames", package_names)
        title = title if title is not None else self.config.get("chooser.url_title")
        return self.choosers.build_url_chooser(url, list(package_names), title).outcome

    # 3.6) showBankAppChooser
    def show_bank_app_chooser(
        self,
        package_names: Optional[Iterable[str]],
        qr_code: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Outcome:
        _require("Package names is null", packageNames=package_names)
        _expect_str(qrCode=qr_code, title=title)
        _expect_str_list("packageNames", package_names)
        title = title if title is not None else self.config.get("chooser.bank_title")
        return self.choosers.build_bank_chooser(list(package_names), qr_code, title).outcome

    # 3.7) showTextChooser
    def show_text_chooser(
        self,
        text: Optional[str],
        title: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> Outcome:
        _require("Text is null", text=text)
        _expect_str(text=text, title=title, hint=hint)
        title = title if title is not None else self.config.get("chooser.text_title")

        # A hint means a general share. Bank QR shares stay off the clipboard.
        if hint is not None:
            try:
                self.copy_to_clipboard(text)
            except ClipboardError as e:
                logger.warning("[SHARE] clipboard copy failed: %s", e)

        try:
            shown = self.channel.share_text(text, title, hint)
        except Exception as e:
            logger.warning("[SHARE] result=failed error=%s", e)
            return Outcome.NOT_APPLICABLE
        if not shown:
            return Outcome.NOT_APPLICABLE
        logger.info("[SHARE] result=shown")
        return Outcome.CHOOSER_SHOWN

    # ------------------------------------------------------------------
    # Method channel
    # ------------------------------------------------------------------
    def handle(self, method: str, arguments: Optional[Mapping[str, Any]] = None) -> ChannelResult:
        route = self._routes().get(method)
        if route is None:
            logger.info("[CHANNEL] method=%s result=not_implemented", method)
            return ChannelResult.not_implemented()
        args = arguments or {}
        try:
            outcome = route(args)
        except ValidationError as e:
            logger.info("[CHANNEL] method=%s result=invalid fields=%s", method, ",".join(e.fields))
            return ChannelResult.error(INVALID_ARGUMENT, e.message)
        except ClipboardError as e:
            return ChannelResult.error(CLIPBOARD_ERROR, str(e))
        logger.debug("[CHANNEL] method=%s outcome=%s", method, outcome.value)
        return ChannelResult.success(outcome.as_bool())

    def _routes(self) -> Dict[str, Callable[[Mapping[str, Any]], Outcome]]:
        return {
            "launchApp": lambda a: self.launch_app(a.get("packageName")),
            "openUrlWithBrowser": lambda a: self.open_url_with_browser(a.get("url"), a.get("packageName")),
            "launchAppWithQR": lambda a: self.launch_app_with_qr(
                a.get("packageName"), a.get("qrCode"), a.get("qrData")
            ),
            "copyToClipboard": lambda a: self.copy_to_clipboard(a.get("text")),
            "showAppChooser": lambda a: self.show_app_chooser(
                a.get("url"), a.get("packageNames"), a.get("title")
            ),
            "showBankAppChooser": lambda a: self.show_bank_app_chooser(
                a.get("packageNames"), a.get("qrCode"), a.get("title")
            ),
            "showTextChooser": lambda a: self.show_text_chooser(a.get("text"), a.get("title"), a.get("hint")),
        }

    def _hand_off(self, tag: str, app_id: str, attempt: DeliveryAttempt) -> Outcome:
        try:
            accepted = self.channel.deliver(app_id, attempt)
        except Exception as e:
            logger.warning("[%s] result=failed app=%s error=%s", tag, app_id, e)
            return Outcome.NOT_APPLICABLE
        if not accepted:
            logger.warning("[%s] result=rejected app=%s", tag, app_id)
            return Outcome.NOT_APPLICABLE
        logger.info("[%s] result=success app=%s", tag, app_id)
        return Outcome.DELIVERED
