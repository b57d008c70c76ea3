import os
import sys
import asyncio
import logging
from typing import List, Dict, Any, Optional

# Add plugin directory to Python path for local imports
PLUGIN_DIR = os.environ.get("MULTI_INSTALL_PLUGIN_DIR")
if PLUGIN_DIR:
    sys.path.insert(0, PLUGIN_DIR)

from multi_install import PLUGIN_ID, PLUGIN_TITLE
from multi_install.models import BatchDecision, BatchOutcome, BatchStatus, SelectableItem
from multi_install.selection import classify, build_menu_items, confirmation_message
from multi_install.settings import Settings, load_settings
from multi_install.logging_setup import configure_logging
from multi_install.controllers import BatchProgress, CancelToken, InstallCallbackSet
from multi_install.services import BatchAlreadyRunning, BatchInstallCoordinator
from multi_install.integrations import CooperatingAddon, detect
from multi_install.host import HostApi, HttpHostBridge
from multi_install.utils.paths import LOG_PATH

logger = logging.getLogger("multi_install.plugin")


class Plugin:
    """Multiple Game Install plugin: batch-installs the games selected in the library"""

    id = PLUGIN_ID

    async def _main(self, host: Optional[HostApi] = None, settings: Optional[Settings] = None,
                    log_file: Optional[str] = LOG_PATH):
        self.settings = settings or load_settings()
        configure_logging(self.settings.log_level, log_file)

        logger.info(f"[INIT] {PLUGIN_TITLE} starting (id={PLUGIN_ID})")

        if host is None:
            logger.info(f"[INIT] Connecting to host API at {self.settings.host_url}")
            host = HttpHostBridge(self.settings.host_url,
                                  reconnect_delay=self.settings.event_reconnect_delay)
        self.host = host

        self.progress = BatchProgress()
        self.cancel_token = CancelToken()
        self.callbacks = InstallCallbackSet()
        self.coordinator = BatchInstallCoordinator(
            self.callbacks,
            addon_locator=self._locate_addon,
            poll_interval=self.settings.poll_interval,
            item_timeout=self.settings.item_timeout,
        )

        # Selection remembered between building the menu and clicking it
        self._decision: Optional[BatchDecision] = None
        self._addon: Optional[CooperatingAddon] = None
        self._batch_task: Optional[asyncio.Task] = None
        self._confirming = False
        self.last_outcome: Optional[BatchOutcome] = None

        # Completion notifications are recorded whether or not a batch is running
        self.host.subscribe_installed(self.callbacks.add)
        await self.host.start()

        logger.info("[INIT] Plugin initialization complete")

    async def _locate_addon(self) -> Optional[CooperatingAddon]:
        """Detect the cooperating add-on once and reuse the handle afterwards."""
        if not self.settings.integrate_cooperating_addon:
            return None
        if self._addon is None:
            self._addon = await detect(self.host)
        return self._addon

    async def _request_install(self, game_id: str) -> None:
        await self.host.install_game(game_id)

    async def _is_installed(self, game: SelectableItem) -> bool:
        if not game.is_installed:
            game.is_installed = await self.host.is_game_installed(game.id)
        return game.is_installed

    # Frontend-callable methods

    async def get_game_menu_items(self, games: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Build the game menu entries for the current selection.

        Args:
            games: Selected games as host dicts (id, name, is_installed)

        Returns:
            Dict with success status and the menu items (empty if the batch does not apply)
        """
        try:
            selection = [SelectableItem.from_dict(game) for game in games]
            decision = classify(selection)
            items = build_menu_items(decision)

            if not self.coordinator.is_running:
                self._decision = decision if decision.proceed else None

            return {'success': True, 'items': [item.to_dict() for item in items]}
        except Exception as e:
            logger.error(f"[Menu] Error building menu items: {e}", exc_info=True)
            return {'success': False, 'error': str(e), 'items': []}

    async def install_selected(self) -> Dict[str, Any]:
        """Menu action: confirm with the user, then start the batch in the background."""
        if self._confirming or self._batch_active():
            return {'success': False, 'error': 'errors.batchInProgress'}

        decision = self._decision
        if decision is None or not decision.proceed:
            return {'success': False, 'error': 'errors.noSelection'}

        # Held across the prompt so a second click cannot start a parallel batch
        self._confirming = True
        try:
            accepted = await self.host.confirm(PLUGIN_TITLE, confirmation_message(decision))
        except Exception as e:
            logger.error(f"[Menu] Confirmation prompt failed: {e}", exc_info=True)
            return {'success': False, 'error': str(e)}
        finally:
            self._confirming = False

        if self._batch_active():
            return {'success': False, 'error': 'errors.batchInProgress'}

        if not accepted:
            logger.info("[Menu] User declined multi-game installation")
            self._decision = None
            return {'success': True, 'started': False}

        self.cancel_token.reset()
        self._batch_task = asyncio.create_task(self._run_batch(decision))
        return {'success': True, 'started': True, 'total': decision.not_installed_count}

    def _batch_active(self) -> bool:
        return self.coordinator.is_running or bool(self._batch_task and not self._batch_task.done())

    async def _run_batch(self, decision: BatchDecision) -> Optional[BatchOutcome]:
        try:
            outcome = await self.coordinator.run_batch(
                decision,
                self.cancel_token,
                self.progress,
                self._request_install,
                self._is_installed,
            )
        except BatchAlreadyRunning as e:
            logger.warning(f"[Batch] Not starting batch: {e}")
            return None
        self.last_outcome = outcome
        self._decision = None
        logger.info(f"[Batch] Batch ended: {outcome.status.value} ({outcome.processed}/{outcome.total})")

        if outcome.status == BatchStatus.FAILED:
            try:
                await self.host.show_error(PLUGIN_TITLE, outcome.error)
            except Exception as e:
                logger.error(f"[Batch] Could not show error dialog: {e}")
        return outcome

    async def on_game_installed(self, game_id: str) -> Dict[str, Any]:
        """Host notification that a game finished installing."""
        self.callbacks.add(game_id)
        return {'success': True}

    async def get_batch_progress(self) -> Dict[str, Any]:
        return self.progress.to_dict()

    async def get_last_outcome(self) -> Dict[str, Any]:
        if self.last_outcome is None:
            return {'success': False, 'error': 'errors.noBatch'}
        return {'success': True, 'outcome': self.last_outcome.to_dict()}

    async def cancel_batch(self) -> Dict[str, Any]:
        """Request cancellation of the running batch"""
        if not self._batch_active():
            return {'success': False, 'error': 'errors.noBatchRunning'}
        logger.info("[Batch] Cancellation requested by user")
        self.cancel_token.request()
        return {'success': True}

    async def _unload(self):
        logger.info("[UNLOAD] Stopping plugin")
        self.cancel_token.request()
        if self._batch_task and not self._batch_task.done():
            self._batch_task.cancel()
            try:
                await self._batch_task
            except asyncio.CancelledError:
                pass
        await self.host.close()
        logger.info("[UNLOAD] Plugin stopped")
