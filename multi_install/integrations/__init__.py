"""Integrations with other host add-ons."""

from .cooperating_addon import COOPERATING_ADDON_ID, CooperatingAddon, detect

__all__ = [
    'COOPERATING_ADDON_ID',
    'CooperatingAddon',
    'detect',
]
