import json
import logging
from typing import Any, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from apishield.domain.interfaces.user_interface import UserInterface
from apishield.domain.models.common import JsonData
from apishield.domain.models.errors import ClassifiedError

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_data(self, data: JsonData, **kwargs: Any) -> None:
        """Displays response data, pretty-printing anything JSON serialisable.

        Args:
            data: Parsed response data.
            **kwargs: Additional arguments including:
                - title: Panel title (default: "Response")
                - raw: Print compact JSON without a panel
        """
        title = kwargs.get("title", "Response")
        if isinstance(data, str):
            self.console.print(Panel(Text(data), title=f"[bold green]{title}[/bold green]", box=ROUNDED))
            return

        rendered = json.dumps(data, ensure_ascii=False, default=str)
        if kwargs.get("raw"):
            self.console.print(rendered, markup=False, highlight=False, soft_wrap=True)
            return
        self.console.print(Panel(
            JSON(rendered),
            title=f"[bold green]{title}[/bold green]",
            border_style="green",
            box=ROUNDED,
            padding=(0, 1),
        ))

    def display_api_error(self, error: ClassifiedError, **kwargs: Any) -> None:
        """Displays the kind's fixed message; diagnostics go to the log only."""
        logger.debug(f"Displaying API error: {error.describe()}")
        panel = Panel(
            Text(error.message, style="white"),
            title=f"[bold red]{error.kind.value}[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_table(self, title: str, columns: list, rows: list) -> None:
        table = Table(title=title, box=ROUNDED, border_style="cyan")
        for column in columns:
            table.add_column(str(column))
        for row in rows:
            table.add_row(*(str(value) for value in row))
        self.console.print(table)
