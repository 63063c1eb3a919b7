#!/usr/bin/env python3
"""JSON log relay CLI - Main entry point."""

import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

load_dotenv()
console = Console(stderr=True)


def main():
    """Main entry point for the CLI application."""
    try:
        welcome_text = Text("JSON Logger Server", style="bold blue")
        console.print(Panel(welcome_text, title="Welcome", border_style="blue"))
        from logrelay.presentation.cli.commands import app

        app()
    except KeyboardInterrupt:
        console.print("\nGoodbye!", style="yellow")
        sys.exit(0)
    except Exception as e:
        console.print(f"An error occurred: {e}", style="bold red")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
