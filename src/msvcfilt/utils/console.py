from rich.console import Console
from rich.markup import escape

# Diagnostics never share stdout with filtered text
err_console = Console(stderr=True)


def warn(message: str):
    err_console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}", highlight=False, soft_wrap=True)


def error(message: str):
    err_console.print(f"[bold red]Fatal Error:[/bold red] {escape(message)}", highlight=False, soft_wrap=True)
