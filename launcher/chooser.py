"""
Chooser Builder

Responsibility: narrow a caller-ranked candidate list down to the apps that
can actually take the content, then ask the host to show a chooser.

URL chooser:
- keep candidates that are installed AND resolve this exact URL
- caller order is kept as-is (it is the caller's ranking)
- nothing viable → OS generic chooser for the URL; NOT_APPLICABLE only when
  the OS can't show that either

Bank chooser:
- keep candidates that are installed and have a launch handle
- raw QR code goes along under a few fixed keys (no alias projection)
- nothing viable → NOT_APPLICABLE (no URL, so no generic fallback)
"""

import logging
from typing import Iterable, List, Optional

from launcher.alias_table import BANK_CHOOSER_QR_KEYS
from launcher.host import ApplicationRegistry, LaunchChannel
from launcher.models import ChooserPresentation, ChooserResult, Outcome

logger = logging.getLogger("LAUNCHER.Chooser")


class ChooserBuilder:

    def __init__(self, registry: ApplicationRegistry, channel: LaunchChannel):
        self.registry = registry
        self.channel = channel

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    def viable_for_url(self, url: str, candidates: Iterable[str]) -> List[str]:
        viable: List[str] = []
        for app_id in candidates:
            if app_id in viable:
                continue
            try:
                if self.registry.is_installed(app_id) and self.registry.can_resolve(app_id, url):
                    viable.append(app_id)
                    logger.debug("[CHOOSER] added app=%s", app_id)
                else:
                    logger.debug("[CHOOSER] skipped app=%s reason=not_installed_or_unresolved", app_id)
            except Exception as e:
                logger.warning("[CHOOSER] skipped app=%s error=%s", app_id, e)
        return viable

    def viable_for_launch(self, candidates: Iterable[str]) -> List[str]:
        viable: List[str] = []
        for app_id in candidates:
            if app_id in viable:
                continue
            try:
                if self.registry.is_installed(app_id) and self.registry.has_launch_handle(app_id):
                    viable.append(app_id)
                else:
                    logger.debug("[CHOOSER] skipped bank app=%s", app_id)
            except Exception as e:
                logger.warning("[CHOOSER] skipped bank app=%s error=%s", app_id, e)
        return viable

    # ------------------------------------------------------------------
    # Choosers
    # ------------------------------------------------------------------
    def build_url_chooser(self, url: str, candidates: Iterable[str], title: str) -> ChooserResult:
        viable = self.viable_for_url(url, candidates)

        if not viable:
            logger.warning("[CHOOSER] no viable apps, falling back to generic chooser url=%s", url)
            shown = self._show_generic(url, title)
            return ChooserResult(Outcome.CHOOSER_SHOWN if shown else Outcome.NOT_APPLICABLE)

        presentation = ChooserPresentation(
            title=title,
            primary=viable[0],
            secondary=tuple(viable[1:]),
            uri=url,
        )
        return self._show(presentation)

    def build_bank_chooser(
        self, candidates: Iterable[str], raw_code: Optional[str], title: str
    ) -> ChooserResult:
        viable = self.viable_for_launch(candidates)
        if not viable:
            logger.warning("[CHOOSER] no bank apps available")
            return ChooserResult(Outcome.NOT_APPLICABLE)

        extras = ()
        if raw_code is not None:
            extras = tuple((key, raw_code) for key in BANK_CHOOSER_QR_KEYS)

        presentation = ChooserPresentation(
            title=title,
            primary=viable[0],
            secondary=tuple(viable[1:]),
            extras=extras,
        )
        return self._show(presentation)

    # ------------------------------------------------------------------
    # Host calls
    # ------------------------------------------------------------------
    def _show(self, presentation: ChooserPresentation) -> ChooserResult:
        try:
            shown = self.channel.present_chooser(presentation)
        except Exception as e:
            logger.warning("[CHOOSER] result=failed primary=%s error=%s", presentation.primary, e)
            shown = False
        if not shown:
            return ChooserResult(Outcome.NOT_APPLICABLE, presentation.order)
        logger.info("[CHOOSER] result=shown apps=%d primary=%s", len(presentation.order), presentation.primary)
        return ChooserResult(Outcome.CHOOSER_SHOWN, presentation.order)

    def _show_generic(self, url: str, title: str) -> bool:
        try:
            return bool(self.channel.present_generic_chooser(url, title))
        except Exception as e:
            logger.warning("[CHOOSER] generic chooser failed url=%s error=%s", url, e)
            return False
