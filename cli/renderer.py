"""Console output for plugin commands."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from gateway.plugins.installer import InstallResult

console = Console(highlight=False)


class ResultRenderer:
    """Prints command outcomes."""

    def show_result(self, result: InstallResult, headline: str):
        """Print a summary of what was written.

        Args:
            result: Outcome of the install/configure run
            headline: Completion message, e.g. "Plugin installed!"
        """
        lines = [f"[bold cyan]Plugin:[/bold cyan] {escape(result.plugin_name)}"]
        if result.package != result.plugin_name:
            lines.append(f"[bold cyan]Package:[/bold cyan] {escape(result.package)}")

        if result.plugin_enabled:
            lines.append("[green]System config updated[/green]")
            for key, value in result.options.items():
                lines.append(f"  [cyan]{escape(key)}:[/cyan] {escape(repr(value))}")
        else:
            lines.append("[dim]System config unchanged[/dim]")

        if result.policies_added:
            lines.append(f"[green]Gateway policies:[/green] {escape(', '.join(result.policies)) or '(none)'}")
        else:
            lines.append("[dim]Gateway config unchanged[/dim]")

        console.print(Panel("\n".join(lines), title="Plugin", border_style="blue"))
        console.print(headline)

    def show_message(self, message: str):
        console.print(escape(message))

    def show_error(self, message: str):
        console.print(f"[red]✗ {escape(message)}[/red]")
