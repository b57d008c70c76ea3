"""
Integration with the achievements add-on that auto-imports data when games
are installed.

While a batch runs its auto-import settings are switched off so it does not
re-import after every single game; afterwards they are put back and the
add-on is asked to refresh only the games that finished during the batch.
"""

import logging
from typing import Dict, Iterable, Optional

from ..host.base import HostAddon, HostApi

logger = logging.getLogger(__name__)

COOPERATING_ADDON_ID = "cebe6d32-8c46-4459-b993-5a5189d60788"

# Settings switched off for the duration of a batch
AUTO_IMPORT = "auto_import"
AUTO_IMPORT_ON_INSTALLED = "auto_import_on_installed"
OVERRIDDEN_SETTINGS = (AUTO_IMPORT, AUTO_IMPORT_ON_INSTALLED)


class CooperatingAddon:
    """Handle on the detected add-on, holding the settings snapshot between override and restore."""

    def __init__(self, addon: HostAddon):
        self.addon = addon
        self._snapshot: Optional[Dict[str, bool]] = None

    @property
    def is_overridden(self) -> bool:
        return self._snapshot is not None

    async def override(self) -> None:
        """Remember the auto-import settings and turn them off."""
        if self._snapshot is not None:
            logger.warning("[Addon] Settings already overridden, keeping the original snapshot")
            return

        current = await self.addon.get_settings() or {}
        self._snapshot = {key: bool(current.get(key, False)) for key in OVERRIDDEN_SETTINGS}

        logger.info("[Addon] Overriding add-on settings temporarily.")
        await self.addon.update_settings({key: False for key in OVERRIDDEN_SETTINGS})

    async def restore(self) -> None:
        """Write the snapshot back. Does nothing if there is no snapshot."""
        if self._snapshot is None:
            return

        snapshot, self._snapshot = self._snapshot, None
        logger.info("[Addon] Resetting add-on settings back to their normal values.")
        await self.addon.update_settings(snapshot)

    async def request_refresh(self, game_ids: Iterable[str]) -> None:
        ids = sorted(game_ids)
        logger.info(f"[Addon] Telling add-on to refresh database for {len(ids)} games.")
        await self.addon.refresh(ids)


async def detect(host: HostApi) -> Optional[CooperatingAddon]:
    """Find the achievements add-on among the host's installed add-ons.

    Returns:
        A CooperatingAddon handle, or None if the add-on is not installed
    """
    for addon in await host.list_addons():
        if str(addon.id).lower() == COOPERATING_ADDON_ID:
            logger.info("[Addon] Found cooperating add-on, will integrate into plugin.")
            return CooperatingAddon(addon)
    logger.debug("[Addon] Cooperating add-on not installed")
    return None
