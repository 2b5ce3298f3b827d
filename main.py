# Icon auto-clicker - interactive shell
# Grab icons off the screen, then let the bot click them for you forever

import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console

from autoclick import AppConfig, load_config, load_target_config
from autoclick.config import DEFAULT_CONFIG
from autoclick.errors import CaptureError, ConfigError, PointerAbort
from autoclick.scanner import Scanner
from autoclick.ui import Dashboard, make_console_logger, make_logger
from autoclick.vision import IconMatcher, ScreenCapture, load_targets, save_image

HELP = """Commands:
  tl            - set top-left corner from the current mouse position
  br            - set bottom-right corner from the current mouse position
  roi           - show the selected rectangle
  pos           - print the current mouse position
  save [name]   - capture the rectangle and save it into the icons folder
  test          - capture the scan region and save it as roi.png
  auto <mode>   - scan for the icons of a mode from icons.json
  autohs        - auto shake hands (auto hs)
  autoptt       - auto push-to-talk (auto ptt)
  help          - show this help
  exit          - quit"""


def normalize_rect(x1: int, y1: int, x2: int, y2: int) -> Tuple[int, int, int, int]:
    # Corners can be set in any order
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


class IconBot:
    # Command shell around the scanner

    def __init__(
        self,
        config_path: str = "config.yaml",
        console: Optional[Console] = None,
        pointer=None,
        screen=None,
        sleep=time.sleep,
    ):
        self.config_path = config_path
        self.console = console or Console()
        self.log = make_console_logger(self.console)
        self.pointer = pointer
        self.screen = screen
        self._sleep = sleep
        self.cfg: AppConfig = AppConfig()

        self.tl: Optional[Tuple[int, int]] = None
        self.br: Optional[Tuple[int, int]] = None

    def bootstrap(self):
        # Config first, then hardware
        cfg_path = Path(self.config_path)
        if not cfg_path.exists():
            cfg_path.write_text(DEFAULT_CONFIG.strip() + "\n", encoding="utf-8")
        self.cfg = load_config(self.config_path)

        Path(self.cfg.paths.icons_dir).mkdir(parents=True, exist_ok=True)

        if self.screen is None:
            self.screen = ScreenCapture()
        if self.pointer is None:
            from autoclick.human_input import Pointer
            self.pointer = Pointer()

    def run(self):
        self.bootstrap()
        self.console.print("== Icon capture tool (CLI) ==")
        self.console.print(HELP)

        try:
            while True:
                try:
                    line = self.console.input("> ")
                except EOFError:
                    break
                if not self.handle(line):
                    break
        except KeyboardInterrupt:
            pass
        finally:
            self.shutdown()

    def handle(self, line: str) -> bool:
        """Run one command line. False means quit."""
        fields = line.split()
        if not fields:
            return True
        cmd, args = fields[0].lower(), fields[1:]

        if cmd in ("help", "h", "?"):
            self.console.print(HELP)
        elif cmd == "pos":
            p = self.pointer.position()
            self.console.print(f"Mouse at ({p.x},{p.y})")
        elif cmd == "tl":
            p = self.pointer.position()
            self.tl = (p.x, p.y)
            self.console.print(f"Set TL = ({p.x},{p.y})")
        elif cmd == "br":
            p = self.pointer.position()
            self.br = (p.x, p.y)
            self.console.print(f"Set BR = ({p.x},{p.y})")
        elif cmd in ("roi", "icon"):
            self._show_roi()
        elif cmd == "save":
            self._save_icon(args)
        elif cmd == "test":
            self._save_region()
        elif cmd == "auto":
            if not args:
                self.log("Usage: auto <mode>", "WARN")
            else:
                self.run_mode(args[0])
        elif cmd == "autohs":
            self.run_mode("hs")
        elif cmd == "autoptt":
            self.run_mode("ptt")
        elif cmd in ("exit", "quit", "q"):
            self.console.print("Bye!")
            return False
        else:
            self.console.print(f"Unknown command: {cmd} (type 'help' for the list)")
        return True

    def _rect(self) -> Optional[Tuple[int, int, int, int]]:
        if not self.tl or not self.br:
            self.log("Rectangle needs both corners. Use: tl, then br", "WARN")
            return None
        return normalize_rect(*self.tl, *self.br)

    def _show_roi(self):
        rect = self._rect()
        if rect:
            x1, y1, x2, y2 = rect
            self.console.print(f"ROI TL=({x1},{y1}) BR=({x2},{y2}) size=({x2 - x1}x{y2 - y1})")

    def _save_icon(self, args: List[str]):
        rect = self._rect()
        if not rect:
            return
        x1, y1, x2, y2 = rect
        w, h = x2 - x1, y2 - y1
        if w <= 0 or h <= 0:
            self.log("Invalid rectangle (w/h <= 0). Set tl and br again.", "WARN")
            return

        filename = args[0] if args else datetime.now().strftime("%Y%m%d-%H%M%S.%f")[:-3]
        if not filename.lower().endswith(".png"):
            filename += ".png"
        path = Path(self.cfg.paths.icons_dir) / filename

        try:
            shot = self.screen.capture(x1, y1, w, h)
            save_image(str(path), shot.pixels)
        except (CaptureError, OSError) as e:
            self.log(f"Save failed: {e}", "ERROR")
            return
        self.log(f"Saved: {path} (x={x1},y={y1},w={w},h={h})", "SUCCESS")

    def _save_region(self):
        try:
            shot = self.screen.capture(*self.cfg.region.rect)
            save_image("roi.png", shot.pixels)
        except (CaptureError, OSError) as e:
            self.log(f"Region capture failed: {e}", "ERROR")
            return
        self.log(f"Saved region {shot.width}x{shot.height} to roi.png", "SUCCESS")

    def run_mode(self, mode: str, cycles: Optional[int] = None):
        # Scan for one mode's icons until Ctrl+C
        policy = self.cfg.modes.get(mode)
        if policy is None:
            self.log(f"Unknown mode '{mode}'. Known: {', '.join(sorted(self.cfg.modes))}", "WARN")
            return

        try:
            icons = load_target_config(self.cfg.paths.icons_file)
        except ConfigError as e:
            self.log(f"Cannot read {self.cfg.paths.icons_file}: {e}", "ERROR")
            return

        targets = load_targets(icons, mode, log_fn=self.log)
        if not targets:
            self.log(f"No valid icons for mode '{mode}'.", "WARN")
            return
        self.log(f"Scanning for {len(targets)} icon(s): {', '.join(t.name for t in targets)}", "INFO")

        dash = Dashboard(
            mode=mode, console=self.console,
            refresh_ms=self.cfg.ui.refresh_rate_ms, live=self.cfg.ui.dashboard
        )
        log = make_logger(dash)
        matcher = IconMatcher(
            self.cfg.matching,
            debug_path=Path("logs/debug") if self.cfg.visual.debug_mode else None,
            log_fn=log
        )
        scanner = Scanner(
            self.screen, matcher, self.pointer,
            self.cfg.region, self.cfg.timing,
            log_fn=log, dash=dash, sleep=self._sleep
        )

        dash.start()
        try:
            scanner.run(targets, policy, cycles=cycles)
        except KeyboardInterrupt:
            log("Scan stopped.", "WARN")
        except PointerAbort:
            log("Scan aborted (fail-safe). Mouse left where you put it.", "WARN")
        except CaptureError:
            dash.stop()
            self.log("Screen capture is broken. Exiting.", "ERROR")
            self.shutdown()
            sys.exit(1)
        finally:
            dash.stop()

    def shutdown(self):
        if self.screen is not None and hasattr(self.screen, "close"):
            self.screen.close()


def main():
    IconBot().run()


if __name__ == "__main__":
    main()
