"""Interactive strategy menu.

Shows the analysis, offers the candidate selections plus a custom range, and
returns a PruneSelection or None when the user cancels.
"""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .analyzer import SessionAnalyzer
from .errors import InvalidRangeError
from .registry import build_candidates, percent_freed
from .strategies.custom import custom_selection, validate_range_expression
from .types import PruneSelection, Turn, WorkPhase

import claude_prune.strategies  # noqa: F401

CUSTOM = "custom"
DETAILS = "details"

_SHORT_PHASE = [
    (("setup", "requirements"), "Setup"),
    (("Implementation", "coding"), "Build"),
    (("Debugging", "error"), "Debug"),
    (("Discussion", "planning"), "Plan"),
    (("Exploration",), "Explore"),
]


def short_phase_desc(description: str) -> str:
    for needles, short in _SHORT_PHASE:
        if any(n in description for n in needles):
            return short
    return "Work"


def describe_message(turn: Turn) -> str:
    if turn.has_file_edit:
        return "File modifications"
    if turn.has_code:
        return "Code implementation"
    if turn.has_error:
        return "Error handling/debugging"
    if turn.has_tool:
        return "Tool usage"
    return "Discussion"


def group_descriptions(turns: list[Turn]) -> list[tuple[int, int, str]]:
    """Run-length group consecutive turns by description, as 0-based rank ranges."""
    groups: list[tuple[int, int, str]] = []
    for rank, turn in enumerate(turns):
        desc = describe_message(turn)
        if groups and groups[-1][2] == desc:
            start, _, _ = groups[-1]
            groups[-1] = (start, rank, desc)
        else:
            groups.append((rank, rank, desc))
    return groups


def fmt_count(num: int) -> str:
    if num >= 1000:
        return f"{num / 1000:.1f}k"
    return str(num)


def freed_bar(percent: int, width: int = 10) -> str:
    filled = max(0, min(width, int(percent / 100 * width + 0.5)))
    return f"[green]{'▓' * filled}[/green][dim]{'░' * (width - filled)}[/dim] [green]{percent}%[/green]"


class InteractiveUI:
    def __init__(
        self,
        analyzer: SessionAnalyzer,
        console: Console | None = None,
        config: dict | None = None,
    ):
        self.analyzer = analyzer
        self.analysis = analyzer.get_analysis()
        self.candidates = build_candidates(analyzer, config)
        self.console = console or Console()

    # ─── Display ──────────────────────────────────────────────────────────────

    def display_header(self) -> None:
        a = self.analysis
        self.console.print()
        self.console.print("    [bold cyan]CLAUDE[/bold cyan] [bold magenta]PRUNE[/bold magenta]  [dim]context optimizer[/dim]")
        self.console.print(f"    {a.total_messages} messages [dim]•[/dim] {fmt_count(a.total_tokens)} tokens")
        self.console.print()
        self.display_phases()

    def display_phases(self) -> None:
        if not self.analysis.work_phases:
            return
        self.console.print("[dim]Phases:[/dim] " + " [dim]→[/dim] ".join(
            self._phase_chip(p) for p in self.analysis.work_phases
        ))
        self.console.print()

    @staticmethod
    def _phase_chip(phase: WorkPhase) -> str:
        if phase.characteristics.errors > 0:
            icon = "[red]●[/red]"
        elif phase.characteristics.file_edits > 0:
            icon = "[yellow]◆[/yellow]"
        else:
            icon = "[blue]■[/blue]"
        return f"\\[{phase.start_rank + 1}-{phase.end_rank + 1}: {short_phase_desc(phase.description)} {icon}]"

    def display_menu(self) -> list[str]:
        """Print the numbered menu; return the action per entry."""
        actions: list[str] = []
        for cand in self.candidates:
            actions.append(cand.name)
            self.console.print(f"  {len(actions)}. {cand.menu_label}  {freed_bar(cand.percent_freed)}")
        actions.append(CUSTOM)
        self.console.print(f"  {len(actions)}. Custom range selection  [dim]specify ranges manually[/dim]")
        actions.append(DETAILS)
        self.console.print(f"  {len(actions)}. View details  [dim]see all messages[/dim]")
        self.console.print()
        return actions

    def show_message_details(self) -> None:
        self.console.print()
        self.console.print("[bold]Message Details:[/bold]")
        self.console.print("[cyan]" + "─" * 60 + "[/cyan]")
        for start, end, desc in group_descriptions(self.analysis.message_details):
            label = f"Message {start + 1}" if start == end else f"Message {start + 1}-{end + 1}"
            self.console.print(f"{label:<20} {desc}")
        self.console.print()
        Prompt.ask("[dim]Press Enter to return to menu[/dim]", default="", show_default=False, console=self.console)

    # ─── Prompts ──────────────────────────────────────────────────────────────

    def select_strategy(self) -> PruneSelection | None:
        """Run the menu until the user picks a selection or cancels."""
        try:
            while True:
                self.display_header()
                actions = self.display_menu()
                choices = [str(i) for i in range(1, len(actions) + 1)] + ["q"]
                choice = Prompt.ask("Select strategy", choices=choices, default="1", console=self.console)
                if choice == "q":
                    return None

                action = actions[int(choice) - 1]
                if action == CUSTOM:
                    return self.custom_range_selection()
                if action == DETAILS:
                    self.show_message_details()
                    continue

                cand = next(c for c in self.candidates if c.name == action)
                return PruneSelection(indices_to_keep=list(cand.indices), strategy=cand.label)
        except (KeyboardInterrupt, EOFError):
            return None

    def custom_range_selection(self) -> PruneSelection | None:
        """Prompt for a range expression, re-prompting on validation errors.

        An empty answer cancels.
        """
        self.console.print()
        self.console.print("[bold]Custom Range Selection[/bold]")
        self.console.print('[dim]Enter ranges to keep (e.g., "1-5,90-147" or "1-10,50-*" for end)[/dim]')
        while True:
            text = Prompt.ask("Enter ranges to keep", default="", show_default=False, console=self.console)
            if not text.strip():
                return None
            message = validate_range_expression(text)
            if message:
                self.console.print(f"[red]{message}[/red]")
                continue
            try:
                return custom_selection(text, self.analyzer.turn_positions)
            except InvalidRangeError as e:
                self.console.print(f"[red]{e}[/red]")

    def confirm_prune(self, selection: PruneSelection) -> bool:
        total = self.analyzer.total_turns
        kept = len(selection.indices_to_keep)
        freed = percent_freed(total, kept)
        self.console.print()
        self.console.print(f"[yellow]Will keep {kept} of {total} messages (frees ~{freed}% context)[/yellow]")
        try:
            return Confirm.ask("[yellow]Proceed with pruning?[/yellow]", default=True, console=self.console)
        except (KeyboardInterrupt, EOFError):
            return False
