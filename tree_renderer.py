#!/usr/bin/env python3
"""
Tree Renderer for jskill

Builds a directory tree out of a flat list of relative file paths and renders
it as text lines with box-drawing connectors:

    src/
    ├── main.js
    └── lib/
        └── util.js

Nodes keep the order in which their paths were first seen; nothing is sorted.
"""

from dataclasses import dataclass, field
from typing import Union

TEE = "├── "
CORNER = "└── "
PIPE = "│   "
BLANK = "    "


@dataclass
class Leaf:
    name: str


@dataclass
class Branch:
    name: str
    children: list["Node"] = field(default_factory=list)

    def branch(self, name: str) -> "Branch":
        """Return the child branch called *name*, creating it if needed"""
        for child in self.children:
            if isinstance(child, Branch) and child.name == name:
                return child
        child = Branch(name)
        self.children.append(child)
        return child


Node = Union[Leaf, Branch]


def build_tree(files: list[str]) -> list[Node]:
    """Insert every path into a tree and return the top level nodes"""
    root = Branch("")
    for path in files:
        parts = [part for part in path.split("/") if part]
        if not parts:
            continue
        *parents, name = parts
        node = root
        for part in parents:
            node = node.branch(part)
        node.children.append(Leaf(name))
    return root.children


def _render(nodes: list[Node], prefix: str, lines: list[str]):
    for index, node in enumerate(nodes):
        last = index == len(nodes) - 1
        connector = CORNER if last else TEE
        if isinstance(node, Branch):
            lines.append(f"{prefix}{connector}{node.name}/")
            _render(node.children, prefix + (BLANK if last else PIPE), lines)
        else:
            lines.append(f"{prefix}{connector}{node.name}")


def render_tree(files: list[str], root_label: str = ".") -> list[str]:
    """Render *files* as display lines, starting with *root_label*"""
    lines = [root_label]
    _render(build_tree(files), "", lines)
    return lines
