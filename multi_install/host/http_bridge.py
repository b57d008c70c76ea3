"""
aiohttp bridge to the host library manager's local API.

Requests go over plain HTTP/JSON; install notifications arrive on a
websocket event stream that is kept open by a background task and
reconnected when the host drops it.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from .base import HostAddon, HostApi, InstalledCallback

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
# Prompts stay open until the user answers
DIALOG_TIMEOUT = None


class HostApiError(Exception):
    """The host answered a request with an error status."""

    def __init__(self, status: int, message: str):
        super().__init__(f"Host API error {status}: {message}")
        self.status = status
        self.message = message


class HttpHostAddon(HostAddon):
    """Host add-on reached through the bridge's HTTP API."""

    def __init__(self, bridge: 'HttpHostBridge', addon_id: str, name: str = ""):
        self._bridge = bridge
        self._id = addon_id
        self._name = name or addon_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    async def get_settings(self) -> Dict[str, Any]:
        return await self._bridge._request('GET', f"/api/addons/{self._id}/settings")

    async def update_settings(self, values: Dict[str, Any]) -> None:
        await self._bridge._request('PATCH', f"/api/addons/{self._id}/settings", json=values)

    async def refresh(self, game_ids: Iterable[str]) -> None:
        await self._bridge._request(
            'POST', f"/api/addons/{self._id}/refresh", json={'game_ids': sorted(game_ids)}
        )

    def __repr__(self) -> str:
        return f"HttpHostAddon(id={self._id!r}, name={self._name!r})"


class HttpHostBridge(HostApi):
    """HostApi implementation over the host's REST + websocket API."""

    def __init__(self, base_url: str, reconnect_delay: float = 5.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip('/')
        self.reconnect_delay = reconnect_delay
        self._session = session
        self._owns_session = session is None
        self._callbacks: List[InstalledCallback] = []
        self._listener_task: Optional[asyncio.Task] = None
        self._running = False

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(self, method: str, path: str, json: Any = None,
                       timeout: Optional[float] = REQUEST_TIMEOUT) -> Any:
        """Send a request to the host and decode its JSON reply (None for empty bodies)."""
        session = self._get_session()
        url = f"{self.base_url}{path}"
        async with session.request(
            method, url, json=json, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as resp:
            if resp.status >= 400:
                text = await resp.text()
                raise HostApiError(resp.status, text[:500])
            if resp.content_length == 0 or resp.content_type != 'application/json':
                return None
            return await resp.json()

    # ============== HostApi ==============

    async def install_game(self, game_id: str) -> None:
        logger.info(f"[Host] Requesting install of {game_id}")
        await self._request('POST', f"/api/games/{game_id}/install")

    async def is_game_installed(self, game_id: str) -> bool:
        data = await self._request('GET', f"/api/games/{game_id}")
        return bool((data or {}).get('is_installed', False))

    async def confirm(self, title: str, message: str) -> bool:
        data = await self._request(
            'POST', "/api/dialogs/confirm",
            json={'title': title, 'message': message, 'buttons': 'yes_no'},
            timeout=DIALOG_TIMEOUT,
        )
        return str((data or {}).get('result', '')).lower() == 'yes'

    async def show_error(self, title: str, message: str) -> None:
        await self._request('POST', "/api/dialogs/error", json={'title': title, 'message': message})

    async def list_addons(self) -> List[HostAddon]:
        data = await self._request('GET', "/api/addons") or []
        return [
            HttpHostAddon(self, str(entry['id']), entry.get('name', ''))
            for entry in data
            if isinstance(entry, dict) and entry.get('id')
        ]

    def subscribe_installed(self, callback: InstalledCallback) -> None:
        self._callbacks.append(callback)

    async def start(self) -> None:
        """Start listening to the host's event stream."""
        if self._running:
            logger.warning("[Host] Event listener already running")
            return
        self._running = True
        self._listener_task = asyncio.create_task(self._listen_loop())
        logger.info(f"[Host] Event listener started for {self.base_url}")

    async def close(self) -> None:
        self._running = False
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
        logger.info("[Host] Bridge closed")

    # ============== Event stream ==============

    async def _listen_loop(self) -> None:
        while self._running:
            try:
                session = self._get_session()
                async with session.ws_connect(f"{self.base_url}/api/events") as ws:
                    logger.info("[Host] Connected to event stream")
                    async for msg in ws:
                        if msg.type == aiohttp.WSMsgType.TEXT:
                            await self._handle_event(msg.json())
                        elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                            break
                logger.warning("[Host] Event stream closed")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"[Host] Event stream error: {e}")
            if self._running:
                await asyncio.sleep(self.reconnect_delay)

    async def _handle_event(self, data: Any) -> None:
        if not isinstance(data, dict) or data.get('event') != 'game_installed':
            return
        game_id = data.get('game_id')
        if game_id is None:
            logger.warning(f"[Host] game_installed event without game_id: {data}")
            return
        for callback in list(self._callbacks):
            try:
                result = callback(str(game_id))
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"[Host] Install callback failed for {game_id}: {e}", exc_info=True)
