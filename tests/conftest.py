from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
# main.py and the multi_install package live at the repository root
sys.path.insert(0, str(ROOT))
