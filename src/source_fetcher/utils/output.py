"""Rich console output utilities."""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)


console = Console()


def print_info(message: str) -> None:
    """Print a status message for a step that is starting."""
    console.print(f"[bold blue]==>[/bold blue] [bold]{message}[/bold]")


def print_detail(message: str) -> None:
    """Print a plain follow-up line."""
    console.print(message, highlight=False)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}", style="red")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def create_progress() -> Progress:
    """Create a Rich progress bar for downloads."""
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    )
