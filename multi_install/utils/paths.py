"""Multiple Game Install file path constants."""

import os


# Plugin data directory
MULTI_INSTALL_DATA_DIR = os.path.expanduser("~/.local/share/multi-install")

# Settings and log files
SETTINGS_PATH = os.path.join(MULTI_INSTALL_DATA_DIR, "settings.json")
LOG_PATH = os.path.join(MULTI_INSTALL_DATA_DIR, "multi-install.log")

