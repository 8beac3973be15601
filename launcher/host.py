"""
HOST CAPABILITIES

The launcher never touches the OS directly. Everything it needs from the
host is behind three small interfaces:

- ApplicationRegistry → is an app installed, does it have a launch handle,
  can it resolve a given URI (read-only)
- LaunchChannel → hand an attempt to one app, or show a chooser
- Clipboard → write plain text

Implementations:
- launcher.desktop_host → real Windows desktop host
- FakeRegistry / RecordingChannel / MemoryClipboard (below) → in-memory,
  controllable installed/resolvable sets for tests and dry runs
"""

# ============================================================================
# 1) IMPORTS
# ============================================================================
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set, Tuple

from launcher.models import ChooserPresentation, DeliveryAttempt


# ============================================================================
# 2) ERRORS
# ============================================================================
class TransportError(Exception):
    """The launch primitive failed for an app that should have accepted."""


class ClipboardError(Exception):
    """Clipboard write failed. Always surfaced to the caller."""


# ============================================================================
# 3) INTERFACES
# ============================================================================
class ApplicationRegistry(ABC):

    @abstractmethod
    def is_installed(self, app_id: str) -> bool:
        pass

    @abstractmethod
    def has_launch_handle(self, app_id: str) -> bool:
        """True when the app can be started without any URI."""
        pass

    @abstractmethod
    def can_resolve(self, app_id: str, uri: str) -> bool:
        """True when this specific app would accept this specific URI."""
        pass


class LaunchChannel(ABC):
    """
    Delivery primitives. Launches are fire-and-forget: a True return means
    the host accepted the hand-off, nothing more.

    deliver() may raise TransportError (or anything else); callers treat
    that as one failed attempt.
    """

    @abstractmethod
    def deliver(self, app_id: str, attempt: DeliveryAttempt) -> bool:
        pass

    @abstractmethod
    def present_chooser(self, presentation: ChooserPresentation) -> bool:
        pass

    @abstractmethod
    def present_generic_chooser(self, uri: str, title: str) -> bool:
        """Let the OS offer every app able to handle the URI. False if it can't."""
        pass

    @abstractmethod
    def share_text(self, text: str, title: str, subject: Optional[str] = None) -> bool:
        pass


class Clipboard(ABC):

    @abstractmethod
    def set_text(self, text: str, label: str = "QR Code") -> None:
        """Raise ClipboardError on failure."""
        pass


# ============================================================================
# 4) IN-MEMORY IMPLEMENTATIONS
# ============================================================================
class FakeRegistry(ApplicationRegistry):
    """
    Registry with a fixed world.

    resolvable maps app id → URI prefixes that app accepts
    (e.g. {"com.bank.x": ["napas://"]}). Apps without a launch handle can
    be listed in no_launch_handle.
    """

    def __init__(
        self,
        installed: Iterable[str] = (),
        resolvable: Optional[Dict[str, Iterable[str]]] = None,
        no_launch_handle: Iterable[str] = (),
    ):
        self.installed: Set[str] = set(installed)
        self.resolvable: Dict[str, List[str]] = {
            app: list(prefixes) for app, prefixes in (resolvable or {}).items()
        }
        self.no_launch_handle: Set[str] = set(no_launch_handle)
        self.queries: List[Tuple[str, str]] = []

    def is_installed(self, app_id: str) -> bool:
        self.queries.append(("installed", app_id))
        return app_id in self.installed

    def has_launch_handle(self, app_id: str) -> bool:
        self.queries.append(("launch_handle", app_id))
        return app_id in self.installed and app_id not in self.no_launch_handle

    def can_resolve(self, app_id: str, uri: str) -> bool:
        self.queries.append(("resolve", app_id))
        if app_id not in self.installed:
            return False
        return any(uri.startswith(prefix) for prefix in self.resolvable.get(app_id, []))


class RecordingChannel(LaunchChannel):
    """Records every hand-off. Can be told to reject or blow up."""

    def __init__(
        self,
        accept: bool = True,
        fail_prefixes: Iterable[str] = (),
        fail_launch: bool = False,
        generic_available: bool = True,
        share_available: bool = True,
    ):
        self.accept = accept
        self.fail_prefixes = list(fail_prefixes)
        self.fail_launch = fail_launch
        self.generic_available = generic_available
        self.share_available = share_available
        self.deliveries: List[Tuple[str, DeliveryAttempt]] = []
        self.choosers: List[ChooserPresentation] = []
        self.shares: List[Tuple[str, str, Optional[str]]] = []

    def deliver(self, app_id: str, attempt: DeliveryAttempt) -> bool:
        if attempt.uri is not None and any(attempt.uri.startswith(p) for p in self.fail_prefixes):
            raise TransportError(f"no activity for {attempt.uri}")
        if attempt.uri is None and self.fail_launch:
            raise TransportError(f"launch failed for {app_id}")
        self.deliveries.append((app_id, attempt))
        return self.accept

    def present_chooser(self, presentation: ChooserPresentation) -> bool:
        if presentation.generic and not self.generic_available:
            return False
        self.choosers.append(presentation)
        return True

    def present_generic_chooser(self, uri: str, title: str) -> bool:
        return self.present_chooser(ChooserPresentation(title=title, uri=uri, generic=True))

    def share_text(self, text: str, title: str, subject: Optional[str] = None) -> bool:
        if not self.share_available:
            return False
        self.shares.append((text, title, subject))
        return True


class MemoryClipboard(Clipboard):

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.text: Optional[str] = None
        self.label: Optional[str] = None

    def set_text(self, text: str, label: str = "QR Code") -> None:
        if self.fail:
            raise ClipboardError("clipboard unavailable")
        self.text = text
        self.label = label
