"""Turns the lightweight markdown the model writes into plain text for the PDF body.

Rules are applied in order; each one is a plain regex substitution so it can be
exercised on its own.
"""

import re
from typing import NamedTuple

BULLET_GLYPH = "•"


class SubstitutionRule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    replacement: str

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


# Order matters: longer heading markers first, bold before italic.
RULES: tuple[SubstitutionRule, ...] = (
    SubstitutionRule("h3", re.compile(r"^###\s+", re.MULTILINE), ""),
    SubstitutionRule("h2", re.compile(r"^##\s+", re.MULTILINE), ""),
    SubstitutionRule("h1", re.compile(r"^#\s+", re.MULTILINE), ""),
    SubstitutionRule("bold", re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    SubstitutionRule("italic", re.compile(r"\*(.*?)\*"), r"\1"),
    SubstitutionRule("bullet", re.compile(r"^- ", re.MULTILINE), f"{BULLET_GLYPH} "),
    SubstitutionRule("trailing_space", re.compile(r"[^\S\n]+$", re.MULTILINE), ""),
    SubstitutionRule("blank_lines", re.compile(r"\n{3,}"), "\n\n"),
)

RULES_BY_NAME: dict[str, SubstitutionRule] = {rule.name: rule for rule in RULES}


def markdown_to_plain(text: str) -> str:
    """Strip heading and emphasis markers, swap dashes for bullets and squeeze blank lines."""
    for rule in RULES:
        text = rule.apply(text)
    return text.strip()
