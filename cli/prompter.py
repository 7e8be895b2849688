"""Terminal prompter backed by prompt_toolkit."""

import logging
from typing import Optional

from prompt_toolkit import prompt
from prompt_toolkit.formatted_text import HTML
from rich.console import Console
from rich.markup import escape

from gateway.errors import OptionValidationError
from gateway.plugins.options import OptionPrompter

logger = logging.getLogger(__name__)

console = Console(highlight=False)

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


class TerminalPrompter(OptionPrompter):
    """Asks questions on the terminal.

    Text prompts are pre-filled with the previous value so pressing enter
    keeps it.
    """

    def ask_text(self, message: str, default: Optional[str] = None) -> str:
        return prompt(HTML("<ansigreen>?</ansigreen> <b>{}</b> ").format(message), default=default or "")

    def ask_confirm(self, message: str, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = prompt(HTML("<ansigreen>?</ansigreen> <b>{}</b> ({}) ").format(message, hint))
            answer = answer.strip().lower()
            if not answer:
                return default
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
            console.print("[red]Please answer y or n.[/red]")

    def report_invalid(self, error: OptionValidationError) -> None:
        logger.info(f"Rejected answer for {error.key}: {error}")
        console.print(f"[red]>> {escape(str(error))}[/red]")
