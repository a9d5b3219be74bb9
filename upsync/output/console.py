# Upsync Console Output
# Rich-based console output for user-friendly display

from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from upsync.sync.detector import ChangeAction, ChangeDecision
from upsync.sync.executor import Phase, SyncObserver, SyncOutcome, SyncResult


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations. When a log file is
    given every message is also appended to it without colors.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, log_file: Optional[str] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            log_file: Optional path of a plain-text log.
        """
        self.verbose = verbose
        self._console = RichConsole(highlight=False, no_color=not colored)
        self._log_handle = None
        self._log = None

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._log_handle = open(path, "a", encoding="utf-8")
            self._log = RichConsole(file=self._log_handle, no_color=True, highlight=False, width=200)

    def close(self) -> None:
        """Close the log file, if any."""
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None
            self._log = None

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)
        if self._log is not None:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self._log.print(Text(f"[{timestamp}]"), *args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self.print(f"[blue]{message}[/blue]")

    def print_plain(self, message: str) -> None:
        """Print a line verbatim: no markup, no wrapping."""
        self.print(message, markup=False, soft_wrap=True)

    def print_decision(self, decision: ChangeDecision, *, dry_run: bool = False) -> None:
        """Print one file's action."""
        key = escape(decision.local.key)
        if decision.action == ChangeAction.SKIP:
            if self.verbose:
                self.print(f"    [dim]○ {key} (skipped)[/dim]")
            return

        label = {
            ChangeAction.CREATE: "[green]+[/green]",
            ChangeAction.UPDATE_BODY: "[yellow]↑[/yellow]",
            ChangeAction.UPDATE_METADATA: "[cyan]~[/cyan]",
        }[decision.action]
        verb = "created" if decision.action == ChangeAction.CREATE else "updated"
        if dry_run:
            verb = f"would be {verb}"

        line = f"    {label} {key} {verb}"
        if self.verbose and decision.reason:
            line += f" [dim]- {decision.reason}[/dim]"
        self.print(line)

    def print_remote(self, key: str, *, kept: bool, dry_run: bool = False) -> None:
        """Print a retention verdict for one remote object."""
        key = escape(key)
        if kept:
            if self.verbose:
                self.print(f"    [green]✓[/green] Remote retained {key}.")
            return
        verb = "would be deleted" if dry_run else "deleted"
        self.print(f"    [red]×[/red] Remote {verb}: {key}")

    def print_sync_result(self, result: SyncResult) -> None:
        """
        Print the outcome of a run and the final report line.

        Args:
            result: Sync result to display.
        """
        if result.outcome == SyncOutcome.NOTHING_TO_DO:
            self.print_info("No files to upload and no backups retain requested.")
            return

        if result.outcome == SyncOutcome.DECLINED:
            self.print_warning("No action taken.")
        elif result.errors:
            body = "\n".join(f"• {escape(error)}" for error in result.errors)
            self.print(Panel(body, title=f"{len(result.errors)} file(s) failed", border_style="red"))

        self.print_plain(f"Done. {result.tally.report_line()}")

    def print_bucket_list(self, names: list[str]) -> None:
        """Print bucket names."""
        if not names:
            self.print("[dim]No buckets found[/dim]")
            return
        table = Table(show_header=True, header_style="bold")
        table.add_column("Bucket")
        for name in names:
            table.add_row(name)
        self.print(table)

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask for confirmation.

        Args:
            message: Confirmation message.
            default: Default value if user just presses enter.

        Returns:
            True if confirmed.
        """
        suffix = " [Y/n]" if default else " [y/N]"
        response = self._console.input(f"[red]{escape(message)}[/red]{escape(suffix)}: ").strip().lower()

        if not response:
            return default

        return response in ("y", "yes")


class ConsoleObserver(SyncObserver):
    """Streams executor progress to a Console."""

    def __init__(self, console: Console):
        self.console = console

    def on_phase(self, phase: Phase) -> None:
        if phase == Phase.FETCH_REMOTE_METADATA:
            self.console.print_info("Fetching remote file metadata.")

    def on_candidates(self, count: int, *, filtered: bool) -> None:
        if filtered:
            self.console.print_info(
                f"Found {count} file(s) that meet backups retention criteria for upload. Comparing against bucket..."
            )
        else:
            self.console.print_info(f"Found {count} candidate file upload(s).")

    def on_decision(self, decision: ChangeDecision, *, dry_run: bool) -> None:
        self.console.print_decision(decision, dry_run=dry_run)

    def on_file_error(self, key: str, message: str) -> None:
        self.console.print_error(message)

    def on_remote(self, key: str, *, kept: bool, dry_run: bool) -> None:
        self.console.print_remote(key, kept=kept, dry_run=dry_run)


def create_console(*, verbose: bool = False, colored: bool = True, log_file: Optional[str] = None) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.
        log_file: Optional path of a plain-text log.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored, log_file=log_file)
