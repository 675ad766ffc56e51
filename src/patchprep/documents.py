"""Typed document model for notes and cover letters.

Generated text is assembled as a list of sections holding fields and body
lines, and only turned into a string by `Document.render()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Field:
    """A `Name: value` line."""
    name: str
    value: str

    def render(self) -> str:
        return f"{self.name}: {self.value}".rstrip()


@dataclass
class Section:
    """A titled block of fields followed by free-form body lines."""
    title: str = ""
    fields: list[Field] = field(default_factory=list)
    body: list[str] = field(default_factory=list)

    def add_field(self, name: str, value: str) -> Section:
        self.fields.append(Field(name, value))
        return self

    def add_text(self, text: str) -> Section:
        self.body.extend(text.rstrip("\n").splitlines())
        return self

    def render_lines(self) -> list[str]:
        lines: list[str] = []
        if self.title:
            lines.append(self.title)
            lines.append("")
        lines.extend(f.render() for f in self.fields)
        lines.extend(self.body)
        return lines


@dataclass
class Document:
    """Ordered sections separated by blank lines."""
    sections: list[Section] = field(default_factory=list)

    def add_section(self, section: Section) -> Section:
        self.sections.append(section)
        return section

    def render(self) -> str:
        blocks = ["\n".join(s.render_lines()) for s in self.sections]
        return "\n\n".join(b for b in blocks if b) + "\n"
