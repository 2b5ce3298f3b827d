"""
autoclick/scanner.py - The capture -> match -> click loop.

Both modes share one loop body. ScanPolicy decides:
    capture_once_per_cycle - one snapshot for all targets, or a fresh one per target
    first_hit_only         - stop the cycle at the first target that matches
    inter_target_delay     - pause after each hit before trying the next target

Everything blocks. Nothing overlaps. One snapshot at a time, in order.
"""

import time
from typing import Optional, Sequence, Tuple

from .config import RegionConfig, ScanPolicy, TimingConfig
from .errors import CaptureError
from .matching import Match
from .ui import Dashboard, LogFn
from .vision import Region, Target


class Scanner:

    def __init__(
        self,
        screen,
        matcher,
        pointer,
        region: RegionConfig,
        timing: TimingConfig,
        log_fn: Optional[LogFn] = None,
        dash: Optional[Dashboard] = None,
        sleep=time.sleep,
    ) -> None:
        self.screen = screen
        self.matcher = matcher
        self.pointer = pointer
        self.region = region
        self.timing = timing
        self.dash = dash
        self._log = log_fn or (lambda m, l: None)
        self._sleep = sleep

    def run(self, targets: Sequence[Target], policy: ScanPolicy, cycles: Optional[int] = None) -> int:
        """
        Scan until killed (or for `cycles` rounds). Returns total hits.
        CaptureError is logged and re-raised - no snapshot, no point going on.
        """
        if not targets:
            self._log("No valid icons to scan for.", "WARN")
            return 0

        total = 0
        done = 0
        while cycles is None or done < cycles:
            total += self.scan_cycle(targets, policy)
            done += 1
            self._status(Dashboard.STATUS_SLEEPING, f"next scan in {self.timing.interval_seconds:g}s")
            self._sleep(self.timing.interval_seconds)
        return total

    def scan_cycle(self, targets: Sequence[Target], policy: ScanPolicy) -> int:
        # One pass over the targets in priority order
        if self.dash:
            self.dash.stats.inc_cycles()
        self._status(Dashboard.STATUS_SCANNING)

        shared = self.capture() if policy.capture_once_per_cycle else None
        hits = 0

        for target in targets:
            started = time.perf_counter()
            snapshot = shared if shared is not None else self.capture()

            if self.dash:
                self.dash.set_target(target.name)
                self.dash.update()

            result = self.matcher.match(target, snapshot)
            if not result.found:
                continue

            self.trigger(target, snapshot, result, started)
            hits += 1

            if policy.first_hit_only:
                break
            if policy.inter_target_delay > 0:
                self._sleep(policy.inter_target_delay)

        return hits

    def capture(self) -> Region:
        try:
            return self.screen.capture(*self.region.rect)
        except CaptureError as e:
            self._log(f"Capture failed: {e}", "ERROR")
            if self.dash:
                self.dash.stats.inc_errors()
                self._status(Dashboard.STATUS_ERROR, "capture failed")
            raise

    def trigger(self, target: Target, snapshot: Region, result: Match, started: float) -> Tuple[int, int]:
        # Click the middle of the icon, then hand the mouse back
        cx, cy = click_point(snapshot, target, result)
        self.pointer.click_at(cx, cy, "left", self.timing.click_hold_ms)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if self.dash:
            self.dash.stats.inc_matches()
            self.dash.stats.inc_clicks()
        self._log(
            f"[HIT] {target.name} @ ROI({result.x},{result.y}) ABS({cx},{cy}) ({elapsed_ms:.1f}ms)",
            "HIT"
        )
        return cx, cy

    def _status(self, status: str, detail: str = "") -> None:
        if self.dash:
            self.dash.set_status(status, detail)
            self.dash.update()


def click_point(snapshot: Region, target: Target, result: Match) -> Tuple[int, int]:
    """Absolute screen point at the visual center of a matched target."""
    dx, dy = target.center_offset
    return snapshot.x + result.x + dx, snapshot.y + result.y + dy
