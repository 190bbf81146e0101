"""
Visualization utilities for errsim.

Renders the execution tree explored by a run (DOT, ASCII, JSON). Inner
nodes are operations, edges are the mode chosen for them, and leaves
are executions; leaves of executions that broke the protocol are
highlighted.
"""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from errsim.core.enumerator import RunResult
from errsim.core.history import Step


def _quote(text: str) -> str:
    """Escape *text* for a double-quoted DOT string."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class _TreeNode:
    """Node of the execution tree; ``step`` is None for the root."""

    nid: int
    step: Optional[Step]
    children: Dict[Tuple[str, str], "_TreeNode"] = field(default_factory=dict)
    executions: List[int] = field(default_factory=list)


class ExecutionTreeVisualizer:
    """
    Visualizer for the execution tree of a run.

    Attributes:
        result: The run result whose paths are rendered.
    """

    def __init__(self, result: RunResult) -> None:
        """
        Initialize with a run result.

        Args:
            result: The RunResult to visualize.
        """
        self.result = result
        self._failed: Set[int] = {v.execution for v in result.violations}
        self._root, self._nodes = self._build()

    def _build(self) -> Tuple[_TreeNode, List[_TreeNode]]:
        """Merge the paths of all executions into a prefix tree."""
        root = _TreeNode(nid=0, step=None)
        nodes = [root]
        for index, path in enumerate(self.result.paths):
            node = root
            for step in path:
                edge = (step.key, str(step.mode))
                child = node.children.get(edge)
                if child is None:
                    child = _TreeNode(nid=len(nodes), step=step)
                    node.children[edge] = child
                    nodes.append(child)
                node = child
            node.executions.append(index)
        return root, nodes

    def to_dot(self) -> str:
        """
        Generate DOT format string for Graphviz rendering.

        Returns:
            A DOT format string.
        """
        lines: List[str] = ["digraph ExecutionTree {"]
        lines.append("  rankdir=TB;")
        lines.append("  node [shape=box, style=filled, fillcolor=lightyellow];")
        lines.append('  n0 [label="start", fillcolor=lightblue];')

        for node in self._nodes[1:]:
            lines.append(f'  n{node.nid} [label="{_quote(node.step.key)}"];')

        for node in self._nodes:
            for child in node.children.values():
                label = _quote(str(child.step.mode))
                lines.append(f'  n{node.nid} -> n{child.nid} [label="{label}"];')
            for index in node.executions:
                color = "salmon" if index in self._failed else "palegreen"
                lines.append(
                    f'  e{index} [label="#{index}", shape=ellipse, fillcolor={color}];'
                )
                lines.append(f"  n{node.nid} -> e{index} [style=dashed];")

        lines.append("}")
        return "\n".join(lines)

    def to_ascii(self) -> str:
        """
        Generate an indented ASCII rendering of the tree.

        Returns:
            ASCII art string.
        """
        lines: List[str] = ["=== Execution Tree ==="]
        self._ascii(self._root, 0, lines)
        return "\n".join(lines)

    def _ascii(self, node: _TreeNode, depth: int, lines: List[str]) -> None:
        indent = "  " * depth
        for index in node.executions:
            marker = " !" if index in self._failed else ""
            lines.append(f"{indent}#{index}{marker}")
        for child in node.children.values():
            lines.append(f"{indent}{child.step}")
            self._ascii(child, depth + 1, lines)

    def to_json(self) -> str:
        """
        Generate JSON representation of the tree.

        Returns:
            A JSON string with nodes, edges and executions.
        """
        nodes: List[Dict[str, Any]] = []
        edges: List[Dict[str, Any]] = []
        for node in self._nodes:
            nodes.append(
                {
                    "id": node.nid,
                    "key": node.step.key if node.step else None,
                    "executions": node.executions,
                }
            )
            for child in node.children.values():
                edges.append(
                    {
                        "source": node.nid,
                        "target": child.nid,
                        "mode": str(child.step.mode),
                    }
                )

        failed = sorted(self._failed)
        return json.dumps({"nodes": nodes, "edges": edges, "failed": failed}, indent=2)

    def save_dot(self, filepath: Path) -> None:
        """
        Save DOT format to a file.

        Args:
            filepath: Path to write the DOT file.
        """
        filepath.write_text(self.to_dot())

    def save_image(self, filepath: Path) -> None:
        """
        Render the tree with Graphviz; the format follows the suffix.

        Args:
            filepath: Path to write (``.png``, ``.svg`` or ``.pdf``).

        Raises:
            RuntimeError: If Graphviz is missing or fails.
        """
        fmt = filepath.suffix.lstrip(".").lower() or "png"
        try:
            result = subprocess.run(
                ["dot", f"-T{fmt}", "-o", str(filepath)],
                input=self.to_dot(),
                capture_output=True,
                text=True,
                timeout=30,
            )
            if result.returncode != 0:
                raise RuntimeError(f"Graphviz error: {result.stderr}")
        except FileNotFoundError:
            raise RuntimeError(
                "Graphviz 'dot' command not found. " "Install Graphviz to render images."
            )
