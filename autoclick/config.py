"""
autoclick/config.py - The Knobs and Dials

Two files drive the bot:
    config.yaml - where to look, how picky to be, how often to scan.
    icons.json  - which PNGs belong to which mode ("hs", "ptt", ...).

config.yaml is forgiving: missing file, broken YAML or missing keys all
fall back to defaults. icons.json is not - without targets there is nothing
to click, so a bad icons file raises ConfigError.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import yaml

from .errors import ConfigError


# ═══════════════════════════════════════════════════════════════════════════════
# REGION - Where To Look
# ═══════════════════════════════════════════════════════════════════════════════
#
# Screen rectangle that gets captured every scan. Smaller = faster.
# Icons outside this box don't exist as far as the bot is concerned.
#

@dataclass(frozen=True)
class RegionConfig:
    x: int = 0
    y: int = 0
    width: int = 730
    height: int = 1080

    @property
    def rect(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height


# ═══════════════════════════════════════════════════════════════════════════════
# MATCHING - How Picky To Be
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MatchingConfig:
    # Max per-channel difference (0..255) for two pixels to count as equal.
    # 0 = pixel perfect. ~20 survives compression and slight theme tints.
    tolerance: int = 22

    # Coarse scan stride in pixels. 1 = try every position.
    # 2+ is faster but can step right over the icon.
    scan_step: int = 1

    # Verification stride. 2 checks a quarter of the pixels (plus edges).
    sample_step: int = 2


# ═══════════════════════════════════════════════════════════════════════════════
# TIMING
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimingConfig:
    # Sleep between full scan cycles
    interval_seconds: float = 30.0

    # How long the button stays down on a click
    click_hold_ms: int = 70


# ═══════════════════════════════════════════════════════════════════════════════
# MODES - Hit Policies
# ═══════════════════════════════════════════════════════════════════════════════
#
# hs  - one snapshot per cycle, first icon that matches wins, one click.
# ptt - fresh snapshot per icon, click every icon found, short pause after each.
#

@dataclass(frozen=True)
class ScanPolicy:
    capture_once_per_cycle: bool = True
    first_hit_only: bool = True
    inter_target_delay: float = 0.0


def _default_modes() -> Dict[str, ScanPolicy]:
    return {
        "hs": ScanPolicy(capture_once_per_cycle=True, first_hit_only=True, inter_target_delay=0.0),
        "ptt": ScanPolicy(capture_once_per_cycle=False, first_hit_only=False, inter_target_delay=2.0),
    }


@dataclass(frozen=True)
class PathsConfig:
    icons_file: str = "icons.json"
    icons_dir: str = "icons"


@dataclass(frozen=True)
class VisualConfig:
    # Save annotated hit snapshots to logs/debug
    debug_mode: bool = False


@dataclass(frozen=True)
class UIConfig:
    # Live panel refresh while scanning. Higher = choppier but less CPU.
    refresh_rate_ms: int = 250
    dashboard: bool = True


# ═══════════════════════════════════════════════════════════════════════════════
# MASTER CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AppConfig:
    """
    Everything bundled together. Use load_config() rather than building
    this by hand - it does the YAML parsing and clamping.
    """
    region: RegionConfig = field(default_factory=RegionConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    modes: Dict[str, ScanPolicy] = field(default_factory=_default_modes)
    paths: PathsConfig = field(default_factory=PathsConfig)
    visual: VisualConfig = field(default_factory=VisualConfig)
    ui: UIConfig = field(default_factory=UIConfig)


DEFAULT_CONFIG = """
# Icon auto-clicker configuration

region:
  x: 0
  y: 0
  width: 730
  height: 1080

matching:
  tolerance: 22     # 0..255 per channel
  scan_step: 1
  sample_step: 2

timing:
  interval_seconds: 30
  click_hold_ms: 70

paths:
  icons_file: "icons.json"
  icons_dir: "icons"

modes:
  hs:
    capture_once_per_cycle: true
    first_hit_only: true
    inter_target_delay: 0
  ptt:
    capture_once_per_cycle: false
    first_hit_only: false
    inter_target_delay: 2.0

visual:
  debug_mode: false

ui:
  refresh_rate_ms: 250
  dashboard: true
"""


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIG LOADER
# ═══════════════════════════════════════════════════════════════════════════════

def _get(data: dict, *keys, default=None):
    """Drill into nested dicts without KeyError explosions."""
    for key in keys:
        if not isinstance(data, dict):
            return default
        data = data.get(key)
        if data is None:
            return default
    return data


def _num(value, cast, default):
    """Coerce a scalar, or fall back to the default when it won't go."""
    try:
        return cast(value)
    except (TypeError, ValueError):
        return default


def _flag(value, default: bool) -> bool:
    # Strings are read as words: "false" and "off" are False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in ("true", "yes", "on", "1"):
            return True
        if word in ("false", "no", "off", "0"):
            return False
    return default


def _load_modes(data: dict) -> Dict[str, ScanPolicy]:
    modes = _default_modes()
    raw = _get(data, "modes", default={})
    if not isinstance(raw, dict):
        return modes

    for name, opts in raw.items():
        if not isinstance(opts, dict):
            continue
        base = modes.get(str(name), ScanPolicy())
        modes[str(name)] = ScanPolicy(
            capture_once_per_cycle=_flag(opts.get("capture_once_per_cycle"), base.capture_once_per_cycle),
            first_hit_only=_flag(opts.get("first_hit_only"), base.first_hit_only),
            inter_target_delay=max(0.0, _num(opts.get("inter_target_delay"), float, base.inter_target_delay)),
        )
    return modes


def load_config(path: str = "config.yaml") -> AppConfig:
    """
    Load config from YAML. Missing file = all defaults. Missing keys = defaults.
    Values that won't coerce = defaults. Tolerance is clamped to 0..255.
    """
    config_path = Path(path)

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return AppConfig()  # Malformed YAML fallback.

    region = RegionConfig(
        x=_num(_get(data, "region", "x"), int, 0),
        y=_num(_get(data, "region", "y"), int, 0),
        width=_num(_get(data, "region", "width"), int, 730),
        height=_num(_get(data, "region", "height"), int, 1080),
    )

    matching = MatchingConfig(
        tolerance=min(255, max(0, _num(_get(data, "matching", "tolerance"), int, 22))),
        scan_step=_num(_get(data, "matching", "scan_step"), int, 1),
        sample_step=_num(_get(data, "matching", "sample_step"), int, 2),
    )

    timing = TimingConfig(
        interval_seconds=_num(_get(data, "timing", "interval_seconds"), float, 30.0),
        click_hold_ms=_num(_get(data, "timing", "click_hold_ms"), int, 70),
    )

    return AppConfig(
        region=region,
        matching=matching,
        timing=timing,
        modes=_load_modes(data),
        paths=PathsConfig(
            icons_file=str(_get(data, "paths", "icons_file", default="icons.json")),
            icons_dir=str(_get(data, "paths", "icons_dir", default="icons")),
        ),
        visual=VisualConfig(
            debug_mode=_flag(_get(data, "visual", "debug_mode"), False)
        ),
        ui=UIConfig(
            refresh_rate_ms=_num(_get(data, "ui", "refresh_rate_ms"), int, 250),
            dashboard=_flag(_get(data, "ui", "dashboard"), True),
        ),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ICON SETS - icons.json
# ═══════════════════════════════════════════════════════════════════════════════
#
#   [
#     {"name": "hs",  "file": ["icons/hs_1.png", "icons/hs_2.png"]},
#     {"name": "ptt", "file": ["icons/ptt.png"]}
#   ]
#

@dataclass(frozen=True)
class IconConfig:
    name: str
    files: Tuple[str, ...] = ()


def load_target_config(path: str = "icons.json") -> List[IconConfig]:
    # Map mode names to their reference PNGs
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Icon config not found: {path}") from e
    except (OSError, ValueError) as e:  # JSONDecodeError, UnicodeDecodeError
        raise ConfigError(f"Cannot read icon config {path}: {e}") from e

    if not isinstance(raw, list):
        raise ConfigError(f"{path}: expected a list of icon entries")

    icons = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ConfigError(f"{path}: entry {i} needs a string 'name'")

        files = entry.get("file", [])
        if isinstance(files, str):
            files = [files]
        if not isinstance(files, list) or not all(isinstance(p, str) for p in files):
            raise ConfigError(f"{path}: entry {i} 'file' must be a list of paths")

        icons.append(IconConfig(name=entry["name"], files=tuple(files)))
    return icons
