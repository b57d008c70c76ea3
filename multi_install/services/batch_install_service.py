"""
BatchInstallService - Installs a batch of selected games one after another.

Responsibilities:
- Fire the host's install action for each not-installed game without blocking
- Wait for each game with a bounded poll (state flag, woken early by install notifications)
- Report progress and honour cooperative cancellation between and during waits
- Pause the cooperating add-on's auto-import for the batch and always restore it
"""

import time
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set, Union

from ..controllers.batch_progress import BatchProgress, CancelToken
from ..controllers.install_callbacks import InstallCallbackSet
from ..integrations.cooperating_addon import CooperatingAddon
from ..models import BatchDecision, BatchOutcome, BatchStatus, SelectableItem

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1.0
ITEM_TIMEOUT_SECONDS = 60.0

InstallAction = Callable[[str], Any]
InstalledCheck = Callable[[SelectableItem], Union[bool, Awaitable[bool]]]
AddonLocator = Callable[[], Awaitable[Optional[CooperatingAddon]]]


class BatchAlreadyRunning(Exception):
    """A batch was started while another one is still running."""


class BatchCancelled(Exception):
    """Raised by host callbacks to abort the batch as a user cancellation."""


def _item_flag(game: SelectableItem) -> bool:
    return game.is_installed


class BatchInstallCoordinator:
    """Runs one batch install at a time."""

    def __init__(self, callbacks: InstallCallbackSet,
                 addon_locator: Optional[AddonLocator] = None,
                 poll_interval: float = POLL_INTERVAL_SECONDS,
                 item_timeout: float = ITEM_TIMEOUT_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the coordinator.

        Args:
            callbacks: Set filled by the host's "game installed" notifications
            addon_locator: Async function returning the cooperating add-on handle, or None
            poll_interval: Seconds between installed-state checks
            item_timeout: Seconds to wait for a single game before moving on
            clock: Monotonic time source (injectable for tests)
        """
        self.callbacks = callbacks
        self.addon_locator = addon_locator
        self.poll_interval = poll_interval
        self.item_timeout = item_timeout
        self._clock = clock
        self._running = False
        self._addon: Optional[CooperatingAddon] = None
        self._pending_installs: Set[asyncio.Future] = set()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_batch(self, decision: BatchDecision, cancel: CancelToken, progress: BatchProgress,
                        install_action: InstallAction,
                        is_installed: Optional[InstalledCheck] = None) -> BatchOutcome:
        """Install every not-installed game of a classified selection.

        Args:
            decision: A proceeding decision from ``selection.classify``
            cancel: Cancellation flag, checked before each game and while waiting
            progress: Progress tracker shown by the host
            install_action: Called with a game id to start its install (sync or async)
            is_installed: Completion check for a game, bool or awaitable bool
                (defaults to the game's own ``is_installed`` flag)

        Returns:
            BatchOutcome; failures are reported in it rather than raised
        """
        if not decision.proceed:
            raise ValueError(f"Cannot run a skipped batch ({decision.reason})")
        if self._running:
            raise BatchAlreadyRunning("A batch install is already running")

        self._running = True
        games = decision.not_installed
        total = len(games)
        check = is_installed or _item_flag

        status = BatchStatus.COMPLETED
        error = None
        refreshed: List[str] = []
        try:
            self.callbacks.clear()
            progress.start(total)
            await self._override_addon()

            for game in games:
                if cancel.is_requested():
                    logger.info("[Batch] User canceled multi-game installation.")
                    status = BatchStatus.CANCELLED
                    break

                text = f"Installing {game}, {progress.current}/{total}"
                progress.set_text(text)
                logger.info(f"[Batch] {text}, {game.is_installed}")

                self._dispatch_install(install_action, game)
                installed = await self._wait_for_install(game, cancel, check)

                logger.info(
                    f"[Batch] Finished installing {game}, installed={installed}, "
                    f"or {game.id in self.callbacks}"
                )
                progress.advance()

        except (asyncio.CancelledError, BatchCancelled):
            logger.info("[Batch] User canceled multi-game installation.")
            status = BatchStatus.CANCELLED
        except Exception as e:
            logger.error(f"[Batch] Error while doing multi-game installation: {e}", exc_info=True)
            status = BatchStatus.FAILED
            error = f"Error while doing multi-game installation: {e}"
        finally:
            # The add-on restore must finish even if the task is cancelled again meanwhile
            cleanup = asyncio.ensure_future(self._cleanup())
            try:
                refreshed = await asyncio.shield(cleanup)
            except asyncio.CancelledError:
                logger.info("[Batch] Cancelled during cleanup, letting the add-on restore finish")
                status = BatchStatus.CANCELLED
                refreshed = await cleanup
            finally:
                self._running = False

        progress.finish(status.value, error)
        return BatchOutcome(
            status=status,
            processed=progress.current,
            total=total,
            error=error,
            refreshed_ids=refreshed,
        )

    def _dispatch_install(self, install_action: InstallAction, game: SelectableItem) -> None:
        """Start the install without waiting for it.

        The request runs as a task on the running loop. See ``_start_install``
        for how sync and async actions are told apart.
        """
        future = asyncio.ensure_future(self._start_install(install_action, game.id))
        self._pending_installs.add(future)

        def _on_done(fut: asyncio.Future) -> None:
            self._pending_installs.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                logger.error(f"[Batch] Install request for {game} failed: {exc}")

        future.add_done_callback(_on_done)

    @staticmethod
    async def _start_install(install_action: InstallAction, game_id: str) -> None:
        # Plain callables may block, so they go to the executor. Whatever either
        # kind returns is awaited if awaitable (lambdas wrapping host coroutines).
        if inspect.iscoroutinefunction(install_action):
            result = install_action(game_id)
        else:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, install_action, game_id)
        if inspect.isawaitable(result):
            await result

    async def _wait_for_install(self, game: SelectableItem, cancel: CancelToken,
                                is_installed: InstalledCheck) -> bool:
        """Wait until the game reports installed, cancel is requested or the timeout passes.

        Returns:
            The installed state observed when the wait ended
        """
        loop = asyncio.get_running_loop()
        wake = asyncio.Event()

        def _on_installed(game_id: str) -> None:
            if game_id == game.id:
                loop.call_soon_threadsafe(wake.set)

        self.callbacks.subscribe(_on_installed)
        deadline = self._clock() + self.item_timeout
        try:
            while not await self._check_installed(is_installed, game):
                if cancel.is_requested():
                    return False

                remaining = deadline - self._clock()
                if remaining <= 0:
                    logger.info(
                        f"[Batch] Gave up waiting for {game} after {self.item_timeout:g}s, "
                        f"installed={game.is_installed}"
                    )
                    return False

                try:
                    await asyncio.wait_for(wake.wait(), timeout=min(self.poll_interval, remaining))
                except asyncio.TimeoutError:
                    pass
                wake.clear()
            return True
        finally:
            self.callbacks.unsubscribe(_on_installed)

    @staticmethod
    async def _check_installed(is_installed: InstalledCheck, game: SelectableItem) -> bool:
        result = is_installed(game)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def _override_addon(self) -> None:
        if self.addon_locator is None:
            return
        try:
            self._addon = await self.addon_locator()
        except Exception as e:
            logger.error(f"[Batch] Could not look up cooperating add-on: {e}")
            self._addon = None
            return
        if self._addon is None:
            return
        try:
            await self._addon.override()
        except Exception as e:
            logger.error(f"[Batch] Could not override add-on settings: {e}")

    async def _cleanup(self) -> List[str]:
        """Restore the add-on, ask it to refresh and clear the callback set.

        Returns:
            Ids passed to the add-on's refresh (empty without the add-on)
        """
        addon, self._addon = self._addon, None
        completed = sorted(self.callbacks.snapshot())
        try:
            if addon is None:
                return []
            try:
                await addon.restore()
            except Exception as e:
                logger.error(f"[Batch] Failed to restore add-on settings: {e}", exc_info=True)
            try:
                await addon.request_refresh(completed)
            except Exception as e:
                logger.error(f"[Batch] Failed to request add-on refresh: {e}", exc_info=True)
                return []
            return completed
        finally:
            self.callbacks.clear()
