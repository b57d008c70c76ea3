"""Selection classifier.

Decides whether the "Install N Games" menu entry applies to the current
selection and builds the texts shown around it.
"""

import logging
from typing import Iterable, List

from .models import BatchDecision, BatchSelection, MenuItem, SelectableItem

logger = logging.getLogger(__name__)

MENU_ICON = "InstallIcon"
MENU_ACTION = "install_selected"


def classify(selection: Iterable[SelectableItem]) -> BatchDecision:
    """Split a selection into installed and not-installed games.

    Args:
        selection: Selected games, in the order the user selected them

    Returns:
        ``BatchDecision.skip`` when nothing needs installing or when a single
        game is selected (the host's own Install action covers that case),
        otherwise a proceeding decision carrying the not-installed subset.
    """
    selected = list(selection)
    not_installed = [game for game in selected if not game.is_installed]

    if not not_installed:
        return BatchDecision.skip("nothing to install")
    if len(not_installed) == 1 and len(selected) == 1:
        return BatchDecision.skip("single game selected")

    return BatchDecision.proceed_with(BatchSelection(selected=selected, not_installed=not_installed))


def menu_label(decision: BatchDecision) -> str:
    return f"Install {decision.selected_count} Games"


def confirmation_message(decision: BatchDecision) -> str:
    return (
        f"Out of {decision.selected_count} selected games {decision.not_installed_count} "
        "are not installed. Proceed to install them?\n"
        "Please keep in mind that while games are being installed the UI will be a little laggy."
    )


def build_menu_items(decision: BatchDecision) -> List[MenuItem]:
    """Menu entries for a classified selection (empty when the batch is skipped)."""
    if not decision.proceed:
        logger.debug(f"[Menu] Not offering batch install: {decision.reason}")
        return []
    return [MenuItem(description=menu_label(decision), icon=MENU_ICON, action=MENU_ACTION)]
