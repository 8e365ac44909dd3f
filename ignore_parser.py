#!/usr/bin/env python3
"""
Ignore List Parser for jskill

Turns the text of a .jskillignore file into a list of ignore rules.

Format:
    - One literal path per line, no glob wildcards
    - '#' starts a comment that runs to the end of the line
    - A trailing '/' marks a directory rule
    - Blank lines are ignored
"""

from dataclasses import dataclass
from enum import Enum

SEPARATORS = ("/", "\\")


class IgnoreKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"


@dataclass(frozen=True)
class IgnoreRule:
    path: str
    kind: IgnoreKind

    @property
    def is_directory(self) -> bool:
        return self.kind is IgnoreKind.DIRECTORY

    def to_dict(self) -> dict:
        return {"path": self.path, "type": self.kind.value}

    @classmethod
    def from_dict(cls, data: dict) -> "IgnoreRule":
        return cls(path=data["path"], kind=IgnoreKind(data["type"]))


def _strip_line(line: str) -> str:
    return line.split("#", 1)[0].strip()


def parse_ignore_text(raw: str) -> list[IgnoreRule]:
    """Parse raw ignore file text into rules, in file order.

    Duplicate lines collapse to the first occurrence. Any text is valid input;
    a file holding only comments and blank lines gives an empty list.
    """
    seen: set[str] = set()
    rules: list[IgnoreRule] = []

    for line in raw.splitlines():
        entry = _strip_line(line)
        if not entry or entry in seen:
            continue
        seen.add(entry)

        if entry.endswith(SEPARATORS):
            path = entry.rstrip("/\\")
            kind = IgnoreKind.DIRECTORY
            if not path:
                continue
        else:
            path = entry
            kind = IgnoreKind.FILE

        rule = IgnoreRule(path=path, kind=kind)
        # "build/" and "build//" strip to the same rule
        if rule not in rules:
            rules.append(rule)

    return rules


def rules_to_data(rules: list[IgnoreRule]) -> list[dict]:
    return [rule.to_dict() for rule in rules]


def rules_from_data(data: list[dict]) -> list[IgnoreRule]:
    return [IgnoreRule.from_dict(entry) for entry in data]


def directory_names(rules: list[IgnoreRule]) -> set[str]:
    """Names excluded from directory scanning"""
    return {rule.path for rule in rules if rule.is_directory}


def file_rules(rules: list[IgnoreRule]) -> list[IgnoreRule]:
    return [rule for rule in rules if not rule.is_directory]
