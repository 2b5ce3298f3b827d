# Pointer control - move, press-hold-release, put the mouse back

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Tuple

from .errors import PointerAbort


@dataclass
class Point:
    x: int
    y: int


class Pointer:
    # Thin wrapper over pyautogui so the scan loop never touches it directly

    def __init__(self, backend=None, sleep=time.sleep) -> None:
        if backend is None:
            # Imported here: pyautogui wants a display the moment it loads
            import pyautogui
            # Slam the mouse into a screen corner to abort
            pyautogui.FAILSAFE = True
            backend = pyautogui
        self._gui = backend
        self._failsafe = getattr(backend, "FailSafeException", PointerAbort)
        self._sleep = sleep

    def _call(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except self._failsafe as e:
            raise PointerAbort("mouse fail-safe triggered (pointer in a screen corner)") from e

    def position(self) -> Point:
        x, y = self._gui.position()
        return Point(int(x), int(y))

    def move_to(self, x: int, y: int) -> None:
        self._call(self._gui.moveTo, x, y, _pause=False)

    def click(self, button: str = "left", hold_ms: int = 70) -> Tuple[int, int]:
        # Press, hold, release. Some apps ignore instant clicks.
        self._call(self._gui.mouseDown, button=button, _pause=False)
        try:
            self._sleep(max(0, hold_ms) / 1000.0)
        finally:
            self._call(self._gui.mouseUp, button=button, _pause=False)
        pos = self.position()
        return pos.x, pos.y

    @contextmanager
    def borrowed(self) -> Iterator[Point]:
        """
        Remember where the user left the mouse and put it back afterwards,
        whatever happens in between. A fail-safe abort leaves it alone:
        the user has the mouse now.
        """
        home = self.position()
        aborted = False
        try:
            yield home
        except PointerAbort:
            aborted = True
            raise
        finally:
            if not aborted:
                self.move_to(home.x, home.y)

    def click_at(self, x: int, y: int, button: str = "left", hold_ms: int = 70) -> Tuple[int, int]:
        with self.borrowed():
            self.move_to(x, y)
            return self.click(button, hold_ms)
