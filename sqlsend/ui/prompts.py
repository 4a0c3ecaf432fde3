"""
User prompts for sqlsend.

Provides the session chooser behind the "set connection" command.
"""

from typing import Optional, Sequence

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from rich.console import Console

from ..errors import OperationCancelled


class SessionChooser:
    """Numbered choice between live sessions.

    Callable, so it can be handed to SessionRouter as prompt_choice.
    """

    def __init__(self, console: Optional[Console] = None, message: str = "Connect buffer to session:"):
        self.console = console or Console()
        self.message = message

    def __call__(self, labels: Sequence[str]) -> int:
        return self.choose(labels)

    def choose(self, labels: Sequence[str], default: int = 0) -> int:
        """
        Let user choose a session label.

        Args:
            labels: Session labels, most recent first
            default: Index picked when the user just presses Enter

        Returns:
            Selected index

        Raises:
            OperationCancelled: on 0, Ctrl+C or Ctrl+D
        """
        self.console.print(f"\n{self.message}")

        for i, label in enumerate(labels):
            marker = "→" if i == default else " "
            self.console.print(f"  {marker} [cyan]{i + 1}.[/cyan] {label}")
        self.console.print("  [dim]  0. Cancel[/dim]")

        valid_choices = [str(i) for i in range(0, len(labels) + 1)]
        completer = WordCompleter(valid_choices + list(labels))

        while True:
            try:
                response = prompt(
                    f"Enter choice (1-{len(labels)}): ",
                    completer=completer
                ).strip()
            except (KeyboardInterrupt, EOFError):
                self.console.print("\n[dim]Cancelled[/dim]")
                raise OperationCancelled()

            if not response:
                return default

            if response in labels:
                return list(labels).index(response)

            try:
                choice = int(response)
            except ValueError:
                self.console.print("[red]Please enter a number.[/red]")
                continue

            if choice == 0:
                raise OperationCancelled()
            if 1 <= choice <= len(labels):
                return choice - 1
            self.console.print("[red]Invalid choice. Try again.[/red]")
