# Console output - event log and the live scan panel

from collections import deque
from datetime import datetime
from typing import Callable, Optional

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

VERSION = "v1.0.0"

COLORS = {
    "border": "#334155",
    "muted": "#64748b",
    "text": "#e2e8f0",
    "text_dim": "#94a3b8",
    "heading": "#38bdf8",
    "success": "#10b981",
    "warn": "#f59e0b",
    "error": "#ef4444",
    "info": "#3b82f6",
    "hit": "#a855f7",
    "active": "#10b981",
    "idle": "#64748b",
}

LogFn = Callable[[str, str], None]


class Stats:
    # In-memory session counters. Nothing is written to disk.

    def __init__(self) -> None:
        self._start = datetime.now()
        self.cycles = 0
        self.matches = 0
        self.clicks = 0
        self.errors = 0

    def inc_cycles(self) -> None:
        self.cycles += 1

    def inc_matches(self) -> None:
        self.matches += 1

    def inc_clicks(self) -> None:
        self.clicks += 1

    def inc_errors(self) -> None:
        self.errors += 1

    def get(self) -> dict:
        """Returns dict with keys: runtime, runtime_sec, cycles, matches,
        clicks, errors, hit_rate."""
        total_sec = max(0, int((datetime.now() - self._start).total_seconds()))
        h, rem = divmod(total_sec, 3600)
        m, s = divmod(rem, 60)
        hit_rate = (self.matches / self.cycles * 100) if self.cycles > 0 else 0

        return {
            "runtime": f"{h:02d}:{m:02d}:{s:02d}",
            "runtime_sec": total_sec,
            "cycles": self.cycles,
            "matches": self.matches,
            "clicks": self.clicks,
            "errors": self.errors,
            "hit_rate": hit_rate,
        }


class LogBuffer:
    def __init__(self, max_lines: int = 15) -> None:
        self._lines = deque(maxlen=max_lines)

    def add(self, message: str, level: str = "INFO") -> None:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        self._lines.append((timestamp, level, message))

    def get_all(self):
        return list(self._lines)


def format_line(ts: str, level: str, message: str) -> Text:
    text = Text()
    text.append(f" {ts} ", style=COLORS["text_dim"])
    c = COLORS.get(level.lower(), COLORS["info"])
    text.append(f"[{level:^7}]", style=f"bold {c}")
    text.append(f" {message}", style=COLORS["text"])
    return text


class Dashboard:
    """
    Live panel shown while a scan mode runs: header, counters, current
    target, recent events. Falls back to plain log lines when disabled.
    """

    STATUS_IDLE = "idle"
    STATUS_SCANNING = "scanning"
    STATUS_SLEEPING = "sleeping"
    STATUS_ERROR = "error"

    def __init__(
        self, mode: str = "", console: Optional[Console] = None,
        refresh_ms: int = 250, live: bool = True
    ) -> None:
        self._mode = mode
        self._console = console or Console()
        self._refresh_ms = max(10, refresh_ms)
        self._use_live = live
        self._live: Optional[Live] = None
        self._stats = Stats()
        self._log = LogBuffer(max_lines=50)
        self._status = self.STATUS_IDLE
        self._status_detail = ""
        self._current_target = ""

    @property
    def stats(self): return self._stats

    def log(self, message: str, level: str = "INFO"):
        self._log.add(message, level)
        if not self._live:
            ts, lvl, msg = self._log.get_all()[-1]
            self._console.print(format_line(ts, lvl, msg))

    def set_status(self, status: str, detail: str = ""):
        self._status = status
        self._status_detail = detail

    def set_target(self, name: str):
        self._current_target = name

    def start(self):
        if not self._use_live:
            return
        self._live = Live(
            self._render(), console=self._console,
            refresh_per_second=max(1, 1000 // self._refresh_ms),
            transient=False
        )
        self._live.start()

    def update(self):
        if self._live: self._live.update(self._render())

    def stop(self):
        if self._live:
            self._live.stop()
            self._live = None

    def _render(self):
        # Group, not Layout: Layout would grab the whole terminal height
        middle = Table.grid(expand=True)
        middle.add_column(ratio=2)
        middle.add_column(ratio=1)
        middle.add_row(self._render_stats(), self._render_target())
        return Group(self._render_header(), middle, self._render_log())

    def _render_header(self):
        if self._status == self.STATUS_SCANNING:
            badge = Text(" ⚡ Scanning ", style=f"bold {COLORS['active']}")
        elif self._status == self.STATUS_SLEEPING:
            badge = Text(" ◌ Sleeping ", style=f"bold {COLORS['muted']}")
        elif self._status == self.STATUS_ERROR:
            badge = Text(" ✖ Error ", style=f"bold {COLORS['error']}")
        else:
            badge = Text(" ● Idle ", style=f"bold {COLORS['idle']}")

        subtitle = Text()
        subtitle.append(f" AUTOCLICK {VERSION} ", style=f"bold {COLORS['heading']}")
        subtitle.append("│ Mode: ", style=COLORS['border'])
        subtitle.append(self._mode or "None", style=f"bold {COLORS['text']}")
        subtitle.append("  │  ", style=COLORS['border'])
        subtitle.append_text(badge)
        if self._status_detail:
            subtitle.append(f"  {self._status_detail}", style=COLORS['text_dim'])
        return Panel(Align.center(subtitle), border_style=COLORS['border'])

    def _render_stats(self):
        data = self._stats.get()
        table = Table.grid(padding=(0, 2), expand=True)
        table.add_column("L", justify="right", style=COLORS['muted'])
        table.add_column("V", justify="left", style=f"bold {COLORS['text']}")
        table.add_row("Runtime", data["runtime"])
        table.add_row("Cycles", str(data["cycles"]))
        table.add_row("Matches", str(data["matches"]))
        table.add_row("Clicks", str(data["clicks"]))
        table.add_row("Hit Rate", f"{data['hit_rate']:.1f}%")
        if data["errors"] > 0:
            table.add_row("Errors", Text(str(data["errors"]), style=f"bold {COLORS['error']}"))
        return Panel(table, title=f"[{COLORS['heading']}]Live Stats[/]", border_style=COLORS['border'])

    def _render_target(self):
        lines = [Align.center(Text("Target", style=COLORS['muted'])), Rule(style=COLORS['border'])]
        lines.append(Align.center(Text(self._current_target or "-", style=COLORS['text'])))
        return Panel(Group(*lines), title=f"[{COLORS['heading']}]Now[/]", border_style=COLORS['border'])

    def _render_log(self):
        visible = self._log.get_all()[-8:]
        if not visible:
            return Panel(Align.center(Text("Waiting...", style=COLORS['muted'])),
                         title=f"[{COLORS['heading']}]Event Log[/]", border_style=COLORS['border'])
        text = Text("\n").join(format_line(ts, lvl, msg) for ts, lvl, msg in visible)
        return Panel(Align(text, vertical="bottom"), title=f"[{COLORS['heading']}]Event Log[/]",
                     border_style=COLORS['border'])


def make_logger(dash: Dashboard) -> LogFn:
    def log(msg: str, level: str = "INFO"):
        dash.log(msg, level)
        dash.update()
    return log


def make_console_logger(console: Console) -> LogFn:
    # Shell-side logging: straight to the console, no panel
    def log(msg: str, level: str = "INFO"):
        ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        console.print(format_line(ts, level, msg))
    return log
