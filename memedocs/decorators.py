"""Decorators for memedocs CLI commands."""

import functools
import logging
from typing import Any, Callable

import typer
from rich.console import Console
from rich.markup import escape

from memedocs.vfs.errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)
console = Console()


def handle_bridge_errors(func: Callable) -> Callable:
    """
    Decorator to handle common document bridge errors.

    Centralizes error handling for:
    - NotFoundError: Document or directory doesn't resolve
    - InvalidArgumentError: Malformed id or query
    - FileNotFoundError: Asset location missing or not configured
    - PermissionError: No access to files
    - General exceptions: Unexpected errors
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except NotFoundError as e:
            console.print(f"[bold red]Error:[/bold red] Not found: {escape(str(e))}")
            raise typer.Exit(code=1)
        except InvalidArgumentError as e:
            console.print(f"[bold red]Error:[/bold red] Invalid input: {escape(str(e))}")
            raise typer.Exit(code=2)
        except FileNotFoundError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            console.print("[yellow]Tip: pass --assets or run 'memedocs config --assets-path <dir|zip>'[/yellow]")
            raise typer.Exit(code=1)
        except PermissionError as e:
            console.print(f"[bold red]Error:[/bold red] Permission denied: {escape(str(e))}")
            raise typer.Exit(code=1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(code=130)
        except typer.Exit:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

    return wrapper
