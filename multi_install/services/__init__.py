"""Services layer for Multiple Game Install."""

from .batch_install_service import (
    BatchInstallCoordinator,
    BatchAlreadyRunning,
    BatchCancelled,
    POLL_INTERVAL_SECONDS,
    ITEM_TIMEOUT_SECONDS,
)

__all__ = [
    'BatchInstallCoordinator',
    'BatchAlreadyRunning',
    'BatchCancelled',
    'POLL_INTERVAL_SECONDS',
    'ITEM_TIMEOUT_SECONDS',
]
