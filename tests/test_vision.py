import cv2
import mss.exception
import numpy as np
import pytest

from autoclick.config import IconConfig, MatchingConfig
from autoclick.errors import CaptureError, LoadError
from autoclick.matching import Match
from autoclick.vision import (
    IconMatcher, Region, ScreenCapture, Target, load_image, load_targets,
    save_image, to_rgba,
)

from conftest import A, B, paint, solid


def test_to_rgba_from_bgr():
    bgr = np.zeros((2, 3, 3), dtype=np.uint8)
    bgr[..., 0] = 1  # blue
    bgr[..., 2] = 9  # red
    out = to_rgba(bgr)
    assert out.shape == (2, 3, 4)
    assert tuple(out[0, 0]) == (9, 0, 1, 255)


def test_to_rgba_from_bgra_keeps_alpha():
    bgra = np.array([[[1, 2, 3, 40]]], dtype=np.uint8)
    assert tuple(to_rgba(bgra)[0, 0]) == (3, 2, 1, 40)


def test_to_rgba_from_gray():
    gray = np.full((4, 4), 77, dtype=np.uint8)
    assert tuple(to_rgba(gray)[1, 1]) == (77, 77, 77, 255)


def test_to_rgba_downscales_16_bit():
    deep = np.full((1, 1, 4), 0xABCD, dtype=np.uint16)
    out = to_rgba(deep)
    assert out.dtype == np.uint8
    assert tuple(out[0, 0]) == (0xAB, 0xAB, 0xAB, 0xAB)


def test_save_then_load_png(tmp_path):
    pixels = np.random.default_rng(1).integers(0, 256, (5, 8, 4), dtype=np.uint8)
    path = tmp_path / "icons" / "icon.png"
    save_image(str(path), pixels)
    assert np.array_equal(load_image(str(path)), pixels)


def test_load_image_missing_file(tmp_path):
    with pytest.raises(LoadError):
        load_image(str(tmp_path / "nope.png"))


def test_load_image_garbage(tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"definitely not a png")
    with pytest.raises(LoadError):
        load_image(str(bad))


def test_load_targets_filters_mode_and_skips_broken(tmp_path):
    good = tmp_path / "good.png"
    cv2.imwrite(str(good), np.zeros((3, 4, 3), dtype=np.uint8))
    icons = [
        IconConfig("hs", (str(good), str(tmp_path / "missing.png"))),
        IconConfig("ptt", (str(good),)),
        IconConfig("hs", (str(good),)),
    ]
    logged = []
    targets = load_targets(icons, "hs", log_fn=lambda m, l: logged.append((l, m)))

    assert [t.name for t in targets] == [str(good), str(good)]
    assert (targets[0].width, targets[0].height) == (4, 3)
    assert len(logged) == 1
    assert logged[0][0] == "WARN"
    assert "missing.png" in logged[0][1]


def test_target_center_offset_rounds_down():
    t = Target("x", solid(5, 4))
    assert t.center_offset == (2, 2)


class _FakeShot:
    def __init__(self, frame):
        self.frame = frame

    def __array__(self, dtype=None, copy=None):
        return self.frame


class _FakeSct:
    def __init__(self, frame=None, error=None):
        self.frame = frame
        self.error = error
        self.monitors = []
        self.grabbed = []

    def grab(self, monitor):
        self.grabbed.append(monitor)
        if self.error:
            raise self.error
        return _FakeShot(self.frame)

    def close(self):
        pass


def test_capture_converts_bgra_and_keeps_origin():
    frame = np.zeros((3, 2, 4), dtype=np.uint8)
    frame[..., 0] = 5   # blue
    frame[..., 3] = 255
    screen = ScreenCapture()
    screen._sct = _FakeSct(frame)

    region = screen.capture(40, 60, 2, 3)

    assert screen._sct.grabbed == [{"left": 40, "top": 60, "width": 2, "height": 3}]
    assert (region.x, region.y, region.width, region.height) == (40, 60, 2, 3)
    assert tuple(region.pixels[0, 0]) == (0, 0, 5, 255)


def test_capture_failure_becomes_capture_error():
    screen = ScreenCapture()
    screen._sct = _FakeSct(error=mss.exception.ScreenShotError("no display"))
    with pytest.raises(CaptureError):
        screen.capture(0, 0, 10, 10)


def test_capture_rejects_empty_rect():
    with pytest.raises(CaptureError):
        ScreenCapture().capture(0, 0, 0, 10)


def test_matcher_uses_config_and_writes_debug(tmp_path):
    region = Region(0, 0, paint(solid(10, 10), 4, 4, solid(3, 3, B)))
    target = Target("icons/b.png", solid(3, 3, B))
    matcher = IconMatcher(MatchingConfig(tolerance=0, scan_step=1, sample_step=1), debug_path=tmp_path)

    assert matcher.match(target, region) == Match(True, 4, 4)
    assert len(list(tmp_path.glob("match_b_*.png"))) == 1


def test_matcher_miss_writes_nothing(tmp_path):
    region = Region(0, 0, solid(10, 10, A))
    matcher = IconMatcher(MatchingConfig(), debug_path=tmp_path)
    assert not matcher.match(Target("b", solid(3, 3, B)), region).found
    assert list(tmp_path.iterdir()) == []
