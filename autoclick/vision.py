"""
autoclick/vision.py - Screen capture, icon loading and the matcher wrapper.

Everything in here speaks RGBA uint8 arrays shaped (height, width, 4).
mss hands us BGRA, cv2 hands us BGR/BGRA/gray at 8 or 16 bits; to_rgba()
squashes all of that into the one format matching.py understands.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

import cv2
import mss
import mss.exception
import numpy as np

from .config import IconConfig, MatchingConfig
from .errors import CaptureError, LoadError
from .matching import Match, find_subimage


@dataclass(frozen=True)
class Region:
    # One screen snapshot plus where it came from
    x: int
    y: int
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


@dataclass(frozen=True)
class Target:
    # Reference icon. name is usually the file path.
    name: str
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def center_offset(self) -> Tuple[int, int]:
        return self.width // 2, self.height // 2


def to_rgba(img: np.ndarray, bgr: bool = True) -> np.ndarray:
    """
    Normalize a decoded/captured image to 8-bit RGBA.

    `bgr` says whether color channels arrive in OpenCV/mss order.
    """
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)

    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA if bgr else cv2.COLOR_RGB2RGBA)
    if channels == 4:
        if bgr:
            return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        return np.ascontiguousarray(img)
    raise ValueError(f"Unsupported channel count: {channels}")


def load_image(path: str) -> np.ndarray:
    # PNG (or anything cv2 reads) -> RGBA. Alpha is kept when present.
    if not Path(path).is_file():
        raise LoadError(f"No such file: {path}")
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise LoadError(f"Could not decode image: {path}")
    try:
        return to_rgba(img)
    except ValueError as e:
        raise LoadError(f"{path}: {e}") from e


def save_image(path: str, pixels: np.ndarray) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)):
        raise OSError(f"Could not write image: {path}")


def load_targets(
    icons: Iterable[IconConfig],
    mode: str,
    loader: Callable[[str], np.ndarray] = load_image,
    log_fn: Optional[Callable[[str, str], None]] = None,
) -> List[Target]:
    """
    Collect every file listed under `mode`, in config order.
    Broken files are logged and skipped - a partial set still works.
    """
    log = log_fn or (lambda m, l: None)
    targets = []
    for icon in icons:
        if icon.name != mode:
            continue
        for path in icon.files:
            try:
                pixels = loader(path)
            except LoadError as e:
                log(f"Could not load {path}: {e} (skipped)", "WARN")
                continue
            targets.append(Target(name=path, pixels=pixels))
    return targets


class ScreenCapture:
    # Region grabber using mss (way faster than pyautogui)

    def __init__(self) -> None:
        self._sct = None

    def __enter__(self):
        self._sct = mss.mss()
        return self

    def __exit__(self, exc_type, exc_str, exc_tb):
        self.close()

    def close(self) -> None:
        if self._sct:
            self._sct.close()
            self._sct = None

    def capture(self, x: int, y: int, width: int, height: int) -> Region:
        if width <= 0 or height <= 0:
            raise CaptureError(f"Empty capture rectangle {width}x{height}")
        try:
            if not self._sct:
                self._sct = mss.mss()
            shot = self._sct.grab({"left": x, "top": y, "width": width, "height": height})
        except mss.exception.ScreenShotError as e:
            raise CaptureError(f"Screen capture failed: {e}") from e

        # mss gives BGRA
        return Region(x=x, y=y, pixels=to_rgba(np.array(shot)))


class IconMatcher:
    """
    Binds the matching knobs to find_subimage and optionally dumps an
    annotated snapshot for every hit (visual.debug_mode).
    """

    def __init__(
        self,
        matching: MatchingConfig,
        debug_path: Optional[Path] = None,
        log_fn: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self._tol = matching.tolerance
        self._scan = matching.scan_step
        self._sample = matching.sample_step
        self._debug = debug_path
        self._log = log_fn or (lambda m, l: None)

    def match(self, target: Target, region: Region) -> Match:
        result = find_subimage(region.pixels, target.pixels, self._tol, self._scan, self._sample)
        if result.found:
            self._save_debug(region, target, result)
        return result

    def _save_debug(self, region: Region, target: Target, result: Match) -> None:
        if not self._debug:
            return
        try:
            self._debug.mkdir(parents=True, exist_ok=True)
            vis = cv2.cvtColor(region.pixels, cv2.COLOR_RGBA2BGR)
            cv2.rectangle(
                vis,
                (result.x, result.y),
                (result.x + target.width - 1, result.y + target.height - 1),
                (0, 255, 0), 2
            )
            name = Path(target.name).stem
            cv2.putText(vis, name, (result.x, max(10, result.y - 10)),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)
            ts = int(time.time() * 1000)
            cv2.imwrite(str(self._debug / f"match_{name}_{ts}.png"), vis)
        except (OSError, cv2.error) as e:
            self._log(f"Debug snapshot failed: {e}", "WARN")
