"""Cover letter editing.

`git format-patch --cover-letter` writes a template with two placeholders:

    Subject: [PATCH v2 0/3] *** SUBJECT HERE ***

    *** BLURB HERE ***

The first line of the branch description becomes the subject and the rest
becomes the blurb. `//` and `///` at the start of a body line become `##`
and `###` headings, the literal LAST_PATCH_VERSION is replaced with the
previous version number, and extra sections (the interdiff) are inserted
right before the `-- ` signature.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from patchprep.documents import Section

SUBJECT_PLACEHOLDER = "*** SUBJECT HERE ***"
BLURB_PLACEHOLDER = "*** BLURB HERE ***"
VERSION_PLACEHOLDER = "LAST_PATCH_VERSION"
SIGNATURE_SEPARATOR = "-- "

SUBJECT_PREFIX = re.compile(r"^Subject: (\[[^\]]*\] )?(.*)$")


@dataclass
class CoverLetter:
    """A parsed cover letter."""
    headers: list[str] = field(default_factory=list)
    trailing_headers: list[str] = field(default_factory=list)
    subject_prefix: str = ""
    subject: str = ""
    body: list[str] = field(default_factory=list)
    signature: list[str] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)

    @property
    def has_placeholders(self) -> bool:
        return SUBJECT_PLACEHOLDER in self.subject or BLURB_PLACEHOLDER in self.body

    def fill_from_description(self, description: str) -> bool:
        """Fill the placeholders from a branch description.

        Returns False when there is no description or nothing to fill.
        """
        desc_lines = description.strip("\n").splitlines()
        if not desc_lines or not desc_lines[0].strip():
            return False
        if not self.has_placeholders:
            return False

        subject, blurb = desc_lines[0].strip(), desc_lines[1:]
        while blurb and not blurb[0].strip():
            blurb.pop(0)

        if SUBJECT_PLACEHOLDER in self.subject:
            self.subject = self.subject.replace(SUBJECT_PLACEHOLDER, subject).strip()

        if BLURB_PLACEHOLDER in self.body:
            idx = self.body.index(BLURB_PLACEHOLDER)
            head, rest = self.body[:idx], self.body[idx + 1:]
        else:
            # Newer git puts the description in place of the blurb
            head, rest = [], self.body
        # Older git copies the description below the blurb placeholder
        rest = _drop_prefix(rest, desc_lines)
        if blurb and rest and rest[0].strip():
            rest = [""] + rest
        self.body = head + blurb + rest
        while self.body and not self.body[0].strip():
            self.body.pop(0)
        return True

    def convert_headings(self) -> None:
        converted = []
        for line in self.body:
            if line.startswith("///"):
                line = "###" + line[3:]
            elif line.startswith("//"):
                line = "##" + line[2:]
            converted.append(line)
        self.body = converted

    def substitute_version(self, prev_version: int | None) -> None:
        value = str(prev_version) if prev_version is not None else ""
        self.subject = self.subject.replace(VERSION_PLACEHOLDER, value)
        self.body = [line.replace(VERSION_PLACEHOLDER, value) for line in self.body]

    def add_section(self, section: Section) -> Section:
        self.sections.append(section)
        return section

    def render(self) -> str:
        lines = list(self.headers)
        if self.subject or self.subject_prefix:
            lines.append(f"Subject: {self.subject_prefix}{self.subject}")
        lines.extend(self.trailing_headers)
        lines.append("")
        lines.extend(self.body)
        for section in self.sections:
            if lines and lines[-1].strip():
                lines.append("")
            lines.extend(section.render_lines())
        if self.sections and self.signature and self.signature[0].strip():
            lines.append("")
        lines.extend(self.signature)
        return "\n".join(lines) + "\n"


def _drop_prefix(lines: list[str], prefix: list[str]) -> list[str]:
    """Drop `prefix` (ignoring blank lines around it) from the start of `lines`."""
    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    wanted = [p.rstrip() for p in prefix]
    candidate = [line.rstrip() for line in lines[i:i + len(wanted)]]
    if candidate == wanted:
        return lines[i + len(wanted):]
    return lines


def parse_cover_letter(text: str) -> CoverLetter:
    """Split a cover letter into headers, subject, body and signature."""
    lines = text.splitlines()
    letter = CoverLetter()

    # Mail headers end at the first blank line; Subject may be folded
    i = 0
    in_subject = False
    subject_parts: list[str] = []
    while i < len(lines) and lines[i].strip():
        line = lines[i]
        if line.startswith("Subject: "):
            in_subject = True
            subject_parts.append(line)
        elif in_subject and line[:1] in (" ", "\t"):
            subject_parts.append(line.strip())
        else:
            in_subject = False
            if subject_parts:
                letter.trailing_headers.append(line)
            else:
                letter.headers.append(line)
        i += 1

    match = SUBJECT_PREFIX.match(" ".join(subject_parts))
    if match:
        letter.subject_prefix = match.group(1) or ""
        letter.subject = match.group(2)

    body = lines[i + 1:]
    for idx in range(len(body) - 1, -1, -1):
        if body[idx] == SIGNATURE_SEPARATOR:
            letter.signature = body[idx:]
            body = body[:idx]
            break
    # Blank lines before the signature belong to it
    while body and not body[-1].strip():
        letter.signature.insert(0, body.pop())
    letter.body = body
    return letter


def rewrite_cover_letter(
    path: Path,
    description: str = "",
    prev_version: int | None = None,
    interdiff: Section | None = None,
) -> CoverLetter:
    """Apply all cover letter edits to the file at `path` in place."""
    letter = parse_cover_letter(path.read_text())
    letter.fill_from_description(description)
    letter.convert_headings()
    letter.substitute_version(prev_version)
    if interdiff is not None:
        letter.add_section(interdiff)
    path.write_text(letter.render())
    return letter
