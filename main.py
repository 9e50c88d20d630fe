"""Main CLI entry-point."""
from __future__ import annotations

import asyncio
import shutil
import sys

from tft_stats.core.logging import bootstrap_logging, shutdown_logging
from tft_stats.config import settings

_BRIGHT_GREEN = "\033[1;92m"
_CYAN = "\033[96m"
_YELLOW = "\033[93m"
_RESET = "\033[0m"
_BOLD = "\033[1m"


def _g(s: str) -> str:
    return f"{_BRIGHT_GREEN}{s}{_RESET}"


def _c(s: str) -> str:
    return f"{_CYAN}{s}{_RESET}"


_LOGO = r"""
  ████████╗███████╗████████╗    ███████╗████████╗ █████╗ ████████╗███████╗
  ╚══██╔══╝██╔════╝╚══██╔══╝    ██╔════╝╚══██╔══╝██╔══██╗╚══██╔══╝██╔════╝
     ██║   █████╗     ██║       ███████╗   ██║   ███████║   ██║   ███████╗
     ██║   ██╔══╝     ██║       ╚════██║   ██║   ██╔══██║   ██║   ╚════██║
     ██║   ██║        ██║       ███████║   ██║   ██║  ██║   ██║   ███████║
     ╚═╝   ╚═╝        ╚═╝       ╚══════╝   ╚═╝   ╚═╝  ╚═╝   ╚═╝   ╚══════╝
"""


def _print_logo() -> None:
    cols = shutil.get_terminal_size(fallback=(100, 20)).columns
    div = "═" * min(cols, 80)
    print(_g(div))
    for line in _LOGO.splitlines():
        print(_g(line))
    print(_c("  Teamfight Tactics Composition & Meta Statistics"))
    print(_g(div))


def _menu_actions():
    from tft_stats.presentation.cli import RefreshCommand, RegionStatusCommand, ServeCommand

    return {
        "1": ("Refresh stats", lambda: asyncio.run(RefreshCommand().run())),
        "2": ("Region status", lambda: RegionStatusCommand().run()),
        "3": ("Serve API", lambda: ServeCommand().run()),
    }


def _menu() -> None:
    _print_logo()
    actions = _menu_actions()
    exit_key = str(len(actions) + 1)

    while True:
        width = min(shutil.get_terminal_size(fallback=(96, 20)).columns, 48)
        print(f"\n{_g('═' * width)}")
        print(f"  {_BOLD}MAIN MENU{_RESET}")
        print(_g("═" * width))
        for key, (label, _) in actions.items():
            print(f"  {_c(key)}  {label}")
        print(f"  {_c(exit_key)}  Exit")
        print(_g("─" * width))
        choice = input("  Choose: ").strip()

        if choice == exit_key:
            print(f"\n  {_g('Goodbye!')}\n")
            break
        action = actions.get(choice)
        if action is None:
            print(f"  {_YELLOW}Invalid option.{_RESET}")
            continue
        action[1]()


def main(argv: list[str]) -> int:
    bootstrap_logging(
        service="tft-stats",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="tft_stats.jsonl",
    )
    try:
        _menu()
        return 0
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
