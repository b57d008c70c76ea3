"""Shared utilities for Multiple Game Install."""

from .paths import MULTI_INSTALL_DATA_DIR, SETTINGS_PATH, LOG_PATH

__all__ = [
    'MULTI_INSTALL_DATA_DIR',
    'SETTINGS_PATH',
    'LOG_PATH',
]
