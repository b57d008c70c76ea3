"""Batch state controllers: progress, cancellation and completion callbacks."""

from .batch_progress import BatchProgress, CancelToken
from .install_callbacks import InstallCallbackSet

__all__ = [
    'BatchProgress',
    'CancelToken',
    'InstallCallbackSet',
]
