"""
Data model for batch installs.

Games are owned by the host; the plugin only keeps transient references to them
while a menu is open or a batch is running.
"""
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import List, Dict, Any, Optional


@dataclass
class SelectableItem:
    """A game the user selected in the host library"""
    id: str
    name: str
    is_installed: bool = False  # Flipped by the host once an install completes

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SelectableItem':
        """Build an item from a host payload (accepts snake_case or camelCase keys)."""
        game_id = data.get('id', data.get('gameId'))
        if game_id is None:
            raise ValueError(f"Game payload has no id: {data!r}")
        name = data.get('name') or data.get('title') or str(game_id)
        is_installed = data.get('is_installed', data.get('isInstalled', False))
        return cls(id=str(game_id), name=name, is_installed=bool(is_installed))


@dataclass
class BatchSelection:
    """Everything the user selected, plus the ordered subset that still needs installing."""
    selected: List[SelectableItem]
    not_installed: List[SelectableItem]

    @property
    def selected_count(self) -> int:
        return len(self.selected)

    @property
    def not_installed_count(self) -> int:
        return len(self.not_installed)


@dataclass(frozen=True)
class BatchDecision:
    """Result of classifying a selection: either skip the batch menu or proceed with it."""
    proceed: bool
    selection: Optional[BatchSelection] = None
    reason: str = ""

    @classmethod
    def skip(cls, reason: str) -> 'BatchDecision':
        return cls(proceed=False, reason=reason)

    @classmethod
    def proceed_with(cls, selection: BatchSelection) -> 'BatchDecision':
        return cls(proceed=True, selection=selection)

    @property
    def not_installed(self) -> List[SelectableItem]:
        return list(self.selection.not_installed) if self.selection else []

    @property
    def selected_count(self) -> int:
        return self.selection.selected_count if self.selection else 0

    @property
    def not_installed_count(self) -> int:
        return self.selection.not_installed_count if self.selection else 0


class BatchStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class BatchOutcome:
    """How a batch ended"""
    status: BatchStatus
    processed: int = 0
    total: int = 0
    error: Optional[str] = None                               # Failure detail for the error dialog
    refreshed_ids: List[str] = field(default_factory=list)    # Ids handed to the cooperating add-on

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data


@dataclass
class MenuItem:
    """A game menu entry offered to the host"""
    description: str
    icon: str
    action: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
