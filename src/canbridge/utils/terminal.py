"""
Terminal utilities for console output with a persistent status footer.

Provides a two-section display:
- Main log area (scrolling content)
- Persistent footer line (connection state and routing counters)
"""

import threading
from typing import Dict

from rich.console import Console
from rich.live import Live
from rich.table import Table


class TerminalDisplay:
    """
    Manages terminal display with a persistent footer line.

    The footer shows whether the transport is connected and how many
    messages were forwarded, redirected and dropped so far.
    """

    def __init__(self, enable_footer: bool = True, console: Console | None = None):
        """
        Initialize terminal display.

        Args:
            enable_footer: Whether to enable the persistent footer
            console: Rich console to render to (optional)
        """
        self.enable_footer = enable_footer
        self.lock = threading.Lock()

        self.console = console if console else Console()
        self.live_display: Live | None = None

        self.connected = False
        self.stats: Dict[str, int] = {}

    def print(self, message: str, prefix: str = ""):
        """
        Print a message to the main content area.

        Args:
            message: Message to print
            prefix: Optional prefix (e.g., "[Bridge]")
        """
        if prefix:
            print(f"{prefix} {message}")
        else:
            print(message)

    def init_footer(self):
        """Initialize Rich live footer display."""
        if not self.enable_footer or self.live_display is not None:
            return

        with self.lock:
            self.live_display = Live(
                self._generate_footer_table(),
                console=self.console,
                refresh_per_second=2,
                vertical_overflow="visible"
            )
            self.live_display.start()

    def _generate_footer_table(self) -> Table:
        """Generate footer table with connection state and counters."""
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", no_wrap=True)
        table.add_column(style="magenta", no_wrap=True)

        status = (
            "[bold green]● CONNECTED[/bold green]" if self.connected
            else "[bold dim]○ WAITING[/bold dim]"
        )

        if self.stats:
            counters = " | ".join(f"{name}: {value}" for name, value in self.stats.items())
        else:
            counters = "[dim]No messages yet[/dim]"

        table.add_row(f"[bold]Broker:[/bold] {status}", counters)
        return table

    def update_footer(self, connected: bool | None = None, stats: Dict[str, int] | None = None):
        """
        Update the persistent footer.

        Args:
            connected: Transport connection state
            stats: Routing counters to display
        """
        if not self.enable_footer:
            return

        with self.lock:
            if connected is not None:
                self.connected = connected
            if stats is not None:
                self.stats = dict(stats)

            if self.live_display is not None:
                self.live_display.update(self._generate_footer_table())

    def clear_footer(self):
        """Stop the live footer."""
        if not self.enable_footer:
            return

        with self.lock:
            if self.live_display is not None:
                try:
                    self.live_display.stop()
                finally:
                    self.live_display = None
                    print()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup."""
        self.clear_footer()


def format_stats(stats: Dict[str, int]) -> str:
    """
    Format routing counters for a one-line status print.

    Returns:
        String like: "Received: 10 | Forwarded: 8 | Redirected: 1 | Dropped: 1"
    """
    return " | ".join(
        f"{name.replace('_', ' ').capitalize()}: {value}" for name, value in stats.items()
    )
