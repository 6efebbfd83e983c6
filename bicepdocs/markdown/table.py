"""A minimal GitHub-flavoured Markdown table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class MarkdownTable:
    """A titled table rendered under a heading of the given level."""

    title: str
    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)
    level: int = 2

    def add_row(self, *cells: str) -> None:
        self.rows.append([str(c) for c in cells])

    def __str__(self) -> str:
        lines = [f"{'#' * self.level} {self.title}", ""]
        lines.append(_row(self.headers))
        lines.append(_row(["---"] * len(self.headers)))
        lines.extend(_row(r) for r in self.rows)
        lines.append("")
        return "\n".join(lines)


def _row(cells: List[str]) -> str:
    return "| " + " | ".join(c.replace("|", "\\|") for c in cells) + " |"
