import io

import numpy as np
import pytest
from rich.console import Console

from autoclick.errors import CaptureError
from autoclick.human_input import Pointer
from autoclick.vision import Region

A = (10, 20, 30, 255)
B = (200, 100, 50, 255)


def solid(width, height, rgba=A):
    return np.full((height, width, 4), rgba, dtype=np.uint8)


def paint(canvas, x, y, block):
    h, w = block.shape[:2]
    canvas[y:y + h, x:x + w] = block
    return canvas


class FakeScreen:
    # Serves slices of a fixed canvas; counts captures

    def __init__(self, canvas=None, fail=False):
        self.canvas = canvas
        self.fail = fail
        self.calls = []

    def capture(self, x, y, width, height):
        self.calls.append((x, y, width, height))
        if self.fail:
            raise CaptureError("display went away")
        pixels = self.canvas[y:y + height, x:x + width].copy()
        return Region(x=x, y=y, pixels=pixels)

    def close(self):
        pass


class FailSafe(Exception):
    pass


class FakeGui:
    # Stands in for the pyautogui module

    FailSafeException = FailSafe

    def __init__(self, home=(7, 7), fail_click=False, cornered=False):
        self.pos = home
        self.fail_click = fail_click
        # Every move trips the fail-safe, as if the mouse sat in a corner
        self.cornered = cornered
        self.moves = []
        self.events = []

    def position(self):
        return self.pos

    def moveTo(self, x, y, _pause=True):
        if self.cornered:
            raise FailSafe("corner")
        self.pos = (x, y)
        self.moves.append((x, y))

    def mouseDown(self, button="left", _pause=True):
        if self.fail_click:
            raise RuntimeError("input injection refused")
        self.events.append(("down", button))

    def mouseUp(self, button="left", _pause=True):
        self.events.append(("up", button))


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args[0] if len(args) == 1 else args)


@pytest.fixture
def gui():
    return FakeGui()


@pytest.fixture
def pointer(gui):
    return Pointer(backend=gui, sleep=Recorder())


@pytest.fixture
def quiet_console():
    return Console(file=io.StringIO(), force_terminal=False, width=120)
