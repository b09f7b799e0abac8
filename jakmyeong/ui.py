#!/usr/bin/env python3
"""
Terminal UI
===========
Rich renderers for the CLI: candidate tables, the saju chart and the
name report.

Rich output is used when stdout is a terminal and --quiet is off;
piped output stays plain text (see ``cli.Output``).

Usage:
    from jakmyeong.ui import RichView

    view = RichView()
    view.candidates(result.candidates, title="김 · F")
    view.report(report)
"""

import sys
from typing import List, Optional

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from jakmyeong.saju import ELEMENT_LABELS, SajuResult, YongsinResult, analyze_elements
from jakmyeong.settings import get_setting

LEVEL_STYLES = {
    '대길': 'bold green',
    '길': 'green',
    '반길반흉': 'yellow',
    '흉': 'red',
}

STATUS_STYLES = {
    'good': 'green',
    'caution': 'yellow',
    'forbidden': 'bold red',
}


def use_rich(quiet: bool = False) -> bool:
    return not quiet and sys.stdout.isatty()


class RichView:
    """
    Renders results to a rich Console.

    ``console`` can be a recording console for tests.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        thresholds = get_setting("ui.score_styles", {}) or {}
        self.high_score = thresholds.get("high")
        self.mid_score = thresholds.get("mid")
        if self.high_score is None or self.mid_score is None:
            raise ValueError("ui.score_styles.high and ui.score_styles.mid must be set in app.yaml")

    def _score_text(self, score: float) -> Text:
        if score >= self.high_score:
            style = "bold green"
        elif score >= self.mid_score:
            style = "yellow"
        else:
            style = "dim"
        return Text(f"{score:.0f}", style=style)

    # -------------------------------------------------------------------------
    # Candidates
    # -------------------------------------------------------------------------

    def candidates(self, candidates: List, title: str = "", footer: str = ""):
        table = Table(title=title or None, box=box.ROUNDED, caption=footer or None)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Hanja")
        table.add_column("Roman", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Tier", justify="center")
        table.add_column("Meaning", overflow="fold")

        for c in candidates:
            table.add_row(
                str(c.rank),
                c.full_hangul,
                c.full_hanja,
                c.roman,
                self._score_text(c.score),
                c.suri_tier,
                f"{c.hanja1.meaning} / {c.hanja2.meaning}",
            )
        self.console.print(table)

    def pure_names(self, names: List, title: str = ""):
        table = Table(title=title or None, box=box.ROUNDED)
        table.add_column("Name", style="bold")
        table.add_column("Score", justify="right")
        table.add_column("Meaning", overflow="fold")
        for n in names:
            table.add_row(n.full_name, self._score_text(n.score), ' + '.join(w.meaning for w in n.words))
        self.console.print(table)

    # -------------------------------------------------------------------------
    # Saju
    # -------------------------------------------------------------------------

    def saju(self, saju: SajuResult, yongsin: YongsinResult):
        pillars = Table(box=box.SIMPLE_HEAVY)
        for label in ("Hour", "Day", "Month", "Year"):
            pillars.add_column(label, justify="center")
        cells = []
        for pillar in (saju.hour, saju.day, saju.month, saju.year):
            if pillar is None:
                cells.append(Text("-", style="dim"))
            else:
                cells.append(Text(f"{pillar.hanja}\n{pillar.name}", style="bold"))
        pillars.add_row(*cells)

        distribution = analyze_elements(saju).distribution
        bars = Table.grid(padding=(0, 1))
        bars.add_column()
        bars.add_column()
        for element, count in distribution.items():
            style = "bold green" if element in yongsin.yongsin else ("red" if element in yongsin.gisin else "")
            bars.add_row(ELEMENT_LABELS[element], Text("█" * count or "·", style=style))

        self.console.print(Panel(
            Group(pillars, bars, Text(""), Text(yongsin.summary)),
            title=f"[bold]사주 {saju.birth_date.isoformat()}[/bold] ({saju.source})",
            border_style="blue",
            box=box.ROUNDED,
        ))

    # -------------------------------------------------------------------------
    # Report
    # -------------------------------------------------------------------------

    def report(self, report):
        numerology = Table(box=None, show_header=False, padding=(0, 1))
        for period in report.numerology:
            numerology.add_row(
                period.name,
                Text(period.age_range, style="dim"),
                str(period.number),
                Text(period.level, style=LEVEL_STYLES.get(period.level, "")),
                period.interpretation,
            )

        yin_yang = Text("  ".join(f"{c.hanja}{c.strokes}{c.type}" for c in report.yin_yang.characters))

        elements = Table.grid(padding=(0, 1))
        for element, value in report.natural_element.name_elements.items():
            elements.add_row(ELEMENT_LABELS[element], Text("█" * (value // 20) or "·", style="cyan"))

        forbidden = Table(box=None, show_header=False, padding=(0, 1))
        for char in report.forbidden:
            forbidden.add_row(char.hanja, Text(char.status, style=STATUS_STYLES.get(char.status, "")), char.reason)

        sections = [
            Panel(numerology, title="수리", box=box.MINIMAL),
            Panel(Group(yin_yang, Text(report.yin_yang.summary)), title="음양", box=box.MINIMAL),
            Panel(Group(elements, Text(report.natural_element.summary)), title="자원오행", box=box.MINIMAL),
            Panel(Text(report.pronunciation.summary), title="발음오행", box=box.MINIMAL),
            Panel(Group(forbidden, Text(report.forbidden_summary)), title="불용한자", box=box.MINIMAL),
            Text(report.summary, style="bold"),
        ]
        self.console.print(Panel(
            Group(*sections),
            title=f"[bold]{report.full_hangul} ({report.full_hanja})[/bold]",
            border_style="blue",
            box=box.ROUNDED,
        ))
