"""
autoclick/matching.py - Approximate subimage search.

Two phases per candidate offset:
    1. anchors  - top-left pixel, the four corners and (for targets >= 5x5)
                  the center. Kills almost every position in O(1).
    2. verify   - strided sample of the whole target plus its bottom row and
                  right column.

Pixels are RGBA uint8 rows: arrays shaped (height, width, 4).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


@dataclass(frozen=True)
class Match:
    # Offset of the target's top-left corner inside the region
    found: bool
    x: int = -1
    y: int = -1


NOT_FOUND = Match(False)


def _step(value: int) -> int:
    # Zero or negative strides would never advance
    return max(1, int(value))


def pixels_match(p1: np.ndarray, p2: np.ndarray, tolerance: int) -> bool:
    """True if every channel of p1 and p2 differs by at most `tolerance`."""
    diff = np.abs(np.asarray(p1, dtype=np.int16) - np.asarray(p2, dtype=np.int16))
    return bool(np.all(diff <= tolerance))


def target_anchors(width: int, height: int) -> List[Tuple[int, int]]:
    # (x, y) points inside the target checked before full verification
    anchors = [(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)]
    if width >= 5 and height >= 5:
        anchors.append((width // 2, height // 2))
    return anchors


def anchors_match(region: np.ndarray, target: np.ndarray, x: int, y: int, tolerance: int) -> bool:
    """Cheap rejection test for the candidate offset (x, y)."""
    if not pixels_match(region[y, x], target[0, 0], tolerance):
        return False

    th, tw = target.shape[:2]
    for ax, ay in target_anchors(tw, th):
        if not pixels_match(region[y + ay, x + ax], target[ay, ax], tolerance):
            return False
    return True


def verify_match(
    region: np.ndarray,
    target: np.ndarray,
    x: int,
    y: int,
    tolerance: int,
    sample_step: int,
) -> bool:
    """
    Compare the target against the region window at (x, y) on a strided grid.

    With a stride above 1 the grid may never land on the last row or column,
    so those are sampled separately at the same stride.
    """
    step = _step(sample_step)
    th, tw = target.shape[:2]
    window = region[y:y + th, x:x + tw]

    if not _within(window[::step, ::step], target[::step, ::step], tolerance):
        return False

    if step > 1:
        if not _within(window[th - 1, ::step], target[th - 1, ::step], tolerance):
            return False
        if not _within(window[::step, tw - 1], target[::step, tw - 1], tolerance):
            return False
    return True


def _within(a: np.ndarray, b: np.ndarray, tolerance: int) -> bool:
    return bool(np.all(np.abs(a.astype(np.int16) - b.astype(np.int16)) <= tolerance))


def find_subimage(
    region: np.ndarray,
    target: np.ndarray,
    tolerance: int,
    scan_step: int = 1,
    sample_step: int = 1,
) -> Match:
    """
    Find the first offset (raster order: top-to-bottom, left-to-right) where
    `target` appears in `region` within `tolerance`.

    First found, not best found. Returns NOT_FOUND (offset -1, -1) when the
    target is empty, bigger than the region, or simply not there.
    """
    rh, rw = region.shape[:2]
    th, tw = target.shape[:2]
    if tw == 0 or th == 0 or tw > rw or th > rh:
        return NOT_FOUND

    step = _step(scan_step)

    # Top-left pixel check for every strided candidate in one go.
    # argwhere walks the mask row-major, same order as a scalar raster loop.
    grid = region[0:rh - th + 1:step, 0:rw - tw + 1:step]
    first = target[0, 0].astype(np.int16)
    hits = np.all(np.abs(grid.astype(np.int16) - first) <= tolerance, axis=-1)

    for gy, gx in np.argwhere(hits):
        x, y = int(gx) * step, int(gy) * step
        if not anchors_match(region, target, x, y, tolerance):
            continue
        if verify_match(region, target, x, y, tolerance, sample_step):
            return Match(True, x, y)

    return NOT_FOUND
