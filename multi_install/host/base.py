"""
Interfaces the plugin needs from the host library manager.

The batch logic only talks to these abstractions, so tests can drive it with
mocks and the HTTP bridge can be swapped for another transport.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List


InstalledCallback = Callable[[str], Any]


class HostAddon(ABC):
    """An add-on installed in the host, addressed by its id."""

    @property
    @abstractmethod
    def id(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def get_settings(self) -> Dict[str, Any]:
        """Return the add-on's current settings."""
        pass

    @abstractmethod
    async def update_settings(self, values: Dict[str, Any]) -> None:
        """Overwrite the given settings keys."""
        pass

    @abstractmethod
    async def refresh(self, game_ids: Iterable[str]) -> None:
        """Ask the add-on to re-import its data for the given games."""
        pass


class HostApi(ABC):
    """Host operations used by the batch install plugin."""

    @abstractmethod
    async def install_game(self, game_id: str) -> None:
        """
        Request installation of a game.

        Must return once the request is accepted; it does not wait for the
        install to finish.
        """
        pass

    @abstractmethod
    async def is_game_installed(self, game_id: str) -> bool:
        pass

    @abstractmethod
    async def confirm(self, title: str, message: str) -> bool:
        """Show a Yes/No prompt. Returns True for Yes."""
        pass

    @abstractmethod
    async def show_error(self, title: str, message: str) -> None:
        pass

    @abstractmethod
    async def list_addons(self) -> List[HostAddon]:
        pass

    @abstractmethod
    def subscribe_installed(self, callback: InstalledCallback) -> None:
        """Register ``callback(game_id)`` for "game finished installing" notifications."""
        pass

    async def start(self) -> None:
        """Begin delivering notifications. No-op by default."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

