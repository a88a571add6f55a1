"""Human-readable progress lines for a reconciliation run."""

import sys
import threading
from typing import Optional, TextIO

from rich.console import Console


class ProgressReporter:
    """
    Prints one line per phase and per component outcome.

    Safe to call from generation worker threads; lines are printed whole.
    """

    def __init__(self, enabled: bool = True, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: If False, nothing is printed
            stream: Output stream (default: stdout)
            color: Force colors on/off (default: auto-detect)
        """
        self.enabled = enabled
        self.console = Console(
            file=stream or sys.stdout,
            force_terminal=color,
            no_color=color is False,
            highlight=False,
            soft_wrap=True,
        )
        self._lock = threading.Lock()

    def _print(self, message: str) -> None:
        if not self.enabled:
            return
        with self._lock:
            self.console.print(message)

    def phase(self, message: str) -> None:
        """Announce a phase."""
        self._print(f"[bold cyan]{message}[/bold cyan]")

    def found(self, count: int) -> None:
        self._print(f"Found {count} component(s) to process...")

    def skipped(self, component_name: str) -> None:
        self._print(f"  [green]✓[/green] {component_name} already exists")

    def generating(self, component_name: str) -> None:
        self._print(f"  [blue]…[/blue] Generating {component_name}...")

    def generated(self, component_name: str) -> None:
        self._print(f"  [green]✅[/green] Created {component_name}")

    def deleted(self, component_name: str) -> None:
        self._print(f"  [yellow]🗑[/yellow] Deleting unused component: {component_name}")

    def error(self, component_name: str, message: str) -> None:
        self._print(f"  [red]✗[/red] Error generating {component_name}: {message}")

    def warning(self, message: str) -> None:
        self._print(f"  [yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        self._print(message)

    def done(self, message: str = "Done!") -> None:
        self._print(f"[bold green]{message}[/bold green]")
