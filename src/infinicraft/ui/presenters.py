from __future__ import annotations

from collections.abc import Callable, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import CraftResult, Item


class RichPresenter:
    def __init__(self, *, no_color: bool = False, input_fn: Callable[[str], str] = input):
        # Default: color ON (forced), unless explicitly disabled via --no-color.
        if no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")
        self.quit_requested = False
        self._input = input_fn

    def start_room(self, room_id: str, name: str) -> None:
        title = f"Room {name}" if name else f"Room {room_id}"
        self.console.print(Panel.fit("Pick two items to combine them.", title=title, style="bold cyan"))

    def show_items(self, items: Sequence[Item]) -> None:
        table = Table(show_header=True, header_style="bold blue")
        table.add_column("#", justify="right")
        table.add_column("Item")
        for i, item in enumerate(items, 1):
            table.add_row(str(i), f"{item.emoji} {item.text}")
        self.console.print(table)

    def prompt_pair(self, n: int) -> tuple[int, int] | None:
        """Ask for two item numbers; returns zero-based indexes or None on quit."""

        while True:
            raw = self._input(f"Combine two items (e.g. '1 2', 1-{n}), or 'q' to quit: ").strip().lower()
            if raw == "q":
                self.quit_requested = True
                return None
            if raw in {"h", "help"}:
                self._print_help(n)
                continue
            parts = raw.replace(",", " ").replace("+", " ").split()
            if len(parts) == 2 and all(part.isdigit() for part in parts):
                first, second = (int(part) for part in parts)
                if 1 <= first <= n and 1 <= second <= n:
                    return first - 1, second - 1
            self.console.print(f"[red]Invalid input[/]. Enter two numbers 1-{n}, or 'q'.")

    def crafting(self, a: Item, b: Item) -> None:
        self.console.print(f"[dim]Crafting {a.emoji} {a.text} + {b.emoji} {b.text}...[/]")

    def show_result(self, result: CraftResult) -> None:
        label = f"{result.item.emoji} {result.item.text}"
        if result.is_new:
            self.console.print(f"✨ [green]New discovery[/]: {label}")
        else:
            self.console.print(f"[yellow]Already found[/]: {label} (#{(result.existing_index or 0) + 1})")

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]Crafting failed[/]: {message}")

    def summary(self, items: Sequence[Item], starters: int) -> None:
        discovered = max(0, len(items) - starters)
        self.console.print(f"\nDiscovered [bold]{discovered}[/] new item(s); {len(items)} total.")

    def _print_help(self, n: int) -> None:
        table = Table(show_header=False)
        table.add_row("Combine:", f"two numbers 1–{n}, e.g. '1 2'")
        table.add_row("Help:", "h")
        table.add_row("Quit:", "q")
        self.console.print(Panel.fit(table, title="Controls", style="dim"))
