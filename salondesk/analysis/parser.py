"""Split analysis text into renderable blocks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

TITLE = "title"
TEXT = "text"
GAP = "gap"


@dataclass(frozen=True)
class AnalysisBlock:
    kind: str
    text: str = ""


def parse_analysis(content: str) -> List[AnalysisBlock]:
    """``**HEADING**`` lines become titles, blank lines gaps, the rest text."""

    blocks: List[AnalysisBlock] = []
    for line in content.split("\n"):
        stripped = line.strip()
        if len(stripped) > 4 and stripped.startswith("**") and stripped.endswith("**"):
            blocks.append(AnalysisBlock(TITLE, stripped[2:-2]))
        elif not stripped:
            blocks.append(AnalysisBlock(GAP))
        else:
            blocks.append(AnalysisBlock(TEXT, line))
    return blocks
