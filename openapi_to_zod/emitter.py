"""
Assembly of compiled fragments into the output file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import jinja2

TEMPLATE_DIR = Path(__file__).parent / "templates"

_CONSTRAINT_MARKERS = (".min(", ".max(", ".gte(")


@dataclass
class GenerationStats:
    total_schemas: int = 0
    circular_references: int = 0
    discriminated_unions: int = 0
    with_constraints: int = 0
    allof_conflicts: int = 0
    filter_lines: list[str] = field(default_factory=list)

    @staticmethod
    def from_fragments(fragments: dict[str, str], allof_conflicts: int = 0, filter_lines: list[str] | None = None) -> GenerationStats:
        stats = GenerationStats(total_schemas=len(fragments), allof_conflicts=allof_conflicts, filter_lines=list(filter_lines or []))
        for code in fragments.values():
            if "z.lazy(" in code:
                stats.circular_references += 1
            if "z.discriminatedUnion" in code:
                stats.discriminated_unions += 1
            if any(marker in code for marker in _CONSTRAINT_MARKERS):
                stats.with_constraints += 1
        return stats

    def to_lines(self) -> list[str]:
        lines = [
            "// Generation Statistics:",
            f"//   Total schemas: {self.total_schemas}",
            f"//   Circular references: {self.circular_references}",
            f"//   Discriminated unions: {self.discriminated_unions}",
            f"//   With constraints: {self.with_constraints}",
            f"//   AllOf conflicts: {self.allof_conflicts}",
        ]
        if self.filter_lines:
            lines.append("//")
            lines.extend(f"//   {line}" for line in self.filter_lines)
        return lines


class Emitter:
    """Renders the output file from ordered declarations."""

    def __init__(self):
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.template = self.jinja_env.get_template("output.ts.jinja2")

    def render(
        self,
        declarations: list[str],
        enums: list[str] | None = None,
        import_zod: bool = True,
        stats: GenerationStats | None = None,
    ) -> str:
        """
        Render the output buffer.

        Args:
            declarations: Schema/type declarations in emission order
            enums: `export enum` declarations
            import_zod: Whether any declaration uses the validator library
            stats: Statistics block, omitted when None
        """
        return self.template.render(
            declarations=declarations,
            enums=enums or [],
            import_zod=import_zod,
            stats=stats.to_lines() if stats is not None else [],
        )
