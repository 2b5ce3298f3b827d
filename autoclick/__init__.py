"""
autoclick package - watch a screen region, click known icons

matching.py    - Approximate subimage search (anchors + strided verify)
vision.py      - Region capture (mss), icon loading (OpenCV), matcher wrapper
scanner.py     - Capture -> match -> click loop with per-mode hit policies
human_input.py - Pointer save / move / hold-click / restore (pyautogui)
ui.py          - Rich event log and live scan panel
config.py      - Frozen config dataclasses, config.yaml and icons.json loaders
"""

from .errors import AutoClickError, CaptureError, LoadError, ConfigError, PointerAbort
from .matching import Match, find_subimage, pixels_match, anchors_match, verify_match
from .vision import Region, Target, ScreenCapture, IconMatcher, load_image, save_image, load_targets
from .scanner import Scanner, click_point
from .ui import Dashboard, Stats, make_logger, make_console_logger
from .config import AppConfig, ScanPolicy, IconConfig, load_config, load_target_config

__all__ = [
    "AutoClickError", "CaptureError", "LoadError", "ConfigError", "PointerAbort",
    "Match", "find_subimage", "pixels_match", "anchors_match", "verify_match",
    "Region", "Target", "ScreenCapture", "IconMatcher", "load_image", "save_image", "load_targets",
    "Scanner", "click_point",
    "Dashboard", "Stats", "make_logger", "make_console_logger",
    "AppConfig", "ScanPolicy", "IconConfig", "load_config", "load_target_config",
]
