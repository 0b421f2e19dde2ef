# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global console instance for the local Parley shell."""
from rich.console import Console
from rich.theme import Theme

PARLEY_THEME = Theme(
    {
        "code": "bold cyan",
        "prompt": "bold blue",
        "notice": "dim",
        "error": "bold red",
    }
)

console = Console(theme=PARLEY_THEME)
