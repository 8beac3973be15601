"""Desktop host capabilities (Windows).

Apps come from the fixed host.apps table in config. An app is installed when
its launch executable is on PATH (or is an existing file). It resolves a URI
when that URI's scheme is listed for it.

Extras ride along as environment variables of the launched process.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
import tempfile
from typing import Dict, Optional
from urllib.parse import urlsplit

from launcher.config import Config, get_config
from launcher.dispatch import DispatchFacade
from launcher.host import (
    ApplicationRegistry,
    Clipboard,
    ClipboardError,
    LaunchChannel,
    TransportError,
)
from launcher.models import ChooserPresentation, DeliveryAttempt

LOGGER = logging.getLogger("LAUNCHER.DesktopHost")

CLIPBOARD_TIMEOUT_SECONDS = 3

# One file, overwritten per share, so nothing piles up in %TEMP%.
SHARE_FILE_NAME = "launcher_share.txt"


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _env_key(prefix: str, key: str) -> str:
    return prefix + re.sub(r"[^A-Za-z0-9]", "_", key).upper()


class DesktopRegistry(ApplicationRegistry):

    def __init__(self, apps: Optional[Dict[str, dict]] = None):
        self.apps = apps if apps is not None else get_config().get("host.apps", {})

    def executable(self, app_id: str) -> Optional[str]:
        meta = self.apps.get(app_id)
        if not meta:
            return None
        launch = meta.get("launch")
        if not launch:
            return None
        return shutil.which(launch) or (launch if os.path.isfile(launch) else None)

    def is_installed(self, app_id: str) -> bool:
        return self.executable(app_id) is not None

    def has_launch_handle(self, app_id: str) -> bool:
        return self.is_installed(app_id)

    def can_resolve(self, app_id: str, uri: str) -> bool:
        if not self.is_installed(app_id):
            return False
        scheme = urlsplit(uri).scheme.lower()
        schemes = [s.lower() for s in self.apps[app_id].get("schemes", [])]
        return bool(scheme) and scheme in schemes


class DesktopLaunchChannel(LaunchChannel):

    def __init__(
        self,
        registry: DesktopRegistry,
        env_prefix: str = "LAUNCH_EXTRA_",
        share_dir: Optional[str] = None,
    ):
        self.registry = registry
        self.env_prefix = env_prefix
        self.share_path = os.path.join(share_dir or tempfile.gettempdir(), SHARE_FILE_NAME)

    def _env(self, extras) -> dict:
        env = os.environ.copy()
        for key, value in extras:
            env[_env_key(self.env_prefix, key)] = value
        return env

    def deliver(self, app_id: str, attempt: DeliveryAttempt) -> bool:
        exe = self.registry.executable(app_id)
        if exe is None:
            return False
        command = [exe]
        target = attempt.uri or attempt.data_uri
        if target:
            command.append(target)
        try:
            subprocess.Popen(
                command,
                env=self._env(attempt.extras),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise TransportError(str(e)) from e
        LOGGER.info("[HOST_LAUNCH] app=%s via=%s", app_id, attempt.label or attempt.tier.value)
        return True

    def present_chooser(self, presentation: ChooserPresentation) -> bool:
        items = []
        for app_id in presentation.order:
            exe = self.registry.executable(app_id)
            if exe is None:
                continue
            meta = self.registry.apps.get(app_id, {})
            items.append({
                "Name": meta.get("display", app_id),
                "Id": app_id,
                "Path": exe,
                "Args": presentation.uri or "",
            })
        if not items:
            return False
        script = (
            f"$items = {_ps_quote(json.dumps(items))} | ConvertFrom-Json; "
            f"$pick = $items | Out-GridView -Title {_ps_quote(presentation.title)} -OutputMode Single; "
            "if ($pick) { if ($pick.Args) { Start-Process -FilePath $pick.Path -ArgumentList $pick.Args } "
            "else { Start-Process -FilePath $pick.Path } }"
        )
        try:
            subprocess.Popen(
                ["powershell", "-NoProfile", "-Command", script],
                env=self._env(presentation.extras),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise TransportError(str(e)) from e
        return True

    def present_generic_chooser(self, uri: str, title: str) -> bool:
        try:
            # URL stays a single argv entry; no cmd.exe parsing of & or %
            subprocess.Popen(["rundll32", "url.dll,FileProtocolHandler", uri])
        except OSError as e:
            LOGGER.warning("[HOST_CHOOSER] generic chooser unavailable: %s", e)
            return False
        return True

    def share_text(self, text: str, title: str, subject: Optional[str] = None) -> bool:
        body = f"{subject}\n\n{text}" if subject else text
        try:
            with open(self.share_path, "w", encoding="utf-8") as f:
                f.write(body)
            # Shell "Open with" dialog lists every app for .txt
            subprocess.Popen(["rundll32", "shell32.dll,OpenAs_RunDLL", self.share_path])
        except OSError as e:
            LOGGER.warning("[HOST_SHARE] share unavailable: %s", e)
            return False
        return True


class DesktopClipboard(Clipboard):

    def set_text(self, text: str, label: str = "QR Code") -> None:
        try:
            result = subprocess.run(
                ["powershell", "-NoProfile", "-Command", "$input | Set-Clipboard"],
                input=text,
                capture_output=True,
                text=True,
                timeout=CLIPBOARD_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ClipboardError(str(e)) from e
        if result.returncode != 0:
            raise ClipboardError((result.stderr or "").strip() or f"exit {result.returncode}")


def create_desktop_facade(config: Optional[Config] = None) -> DispatchFacade:
    config = config or get_config()
    registry = DesktopRegistry(config.get("host.apps", {}))
    channel = DesktopLaunchChannel(registry, config.get("host.extra_env_prefix", "LAUNCH_EXTRA_"))
    return DispatchFacade(registry, channel, DesktopClipboard(), config=config)
