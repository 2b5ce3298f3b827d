import pytest

from autoclick.errors import PointerAbort
from autoclick.human_input import Point, Pointer

from conftest import FakeGui, Recorder


def test_position(pointer):
    assert pointer.position() == Point(7, 7)


def test_click_at_moves_clicks_and_returns(gui, pointer):
    assert pointer.click_at(30, 40, hold_ms=120) == (30, 40)
    assert gui.moves == [(30, 40), (7, 7)]
    assert gui.events == [("down", "left"), ("up", "left")]
    assert pointer._sleep.calls == [0.12]


def test_right_button(gui, pointer):
    pointer.click_at(1, 1, button="right")
    assert gui.events == [("down", "right"), ("up", "right")]


def test_pointer_restored_when_click_fails():
    gui = FakeGui(home=(3, 4), fail_click=True)
    pointer = Pointer(backend=gui, sleep=Recorder())
    with pytest.raises(RuntimeError):
        pointer.click_at(50, 60)
    assert gui.moves == [(50, 60), (3, 4)]
    assert gui.pos == (3, 4)


def test_button_released_even_if_hold_is_interrupted():
    gui = FakeGui()

    def interrupted(_):
        raise KeyboardInterrupt

    pointer = Pointer(backend=gui, sleep=interrupted)
    with pytest.raises(KeyboardInterrupt):
        pointer.click_at(9, 9)
    assert gui.events == [("down", "left"), ("up", "left")]
    assert gui.pos == (7, 7)


def test_borrowed_yields_home(gui, pointer):
    with pointer.borrowed() as home:
        pointer.move_to(100, 100)
        assert home == Point(7, 7)
    assert gui.pos == (7, 7)


def test_negative_hold_is_zero(pointer):
    pointer.click(hold_ms=-5)
    assert pointer._sleep.calls == [0.0]


def test_corner_fail_safe_becomes_pointer_abort():
    gui = FakeGui(home=(0, 0), cornered=True)
    pointer = Pointer(backend=gui, sleep=Recorder())
    with pytest.raises(PointerAbort):
        pointer.click_at(30, 40)
    assert gui.events == []
    assert gui.pos == (0, 0)


def test_fail_safe_skips_restore(gui, pointer):
    with pytest.raises(PointerAbort):
        with pointer.borrowed():
            pointer.move_to(50, 50)
            gui.cornered = True
            pointer.move_to(60, 60)
    assert gui.moves == [(50, 50)]
