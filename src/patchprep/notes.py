"""Commit note attached to a single-patch submission.

`git format-patch --notes` puts the note below the `---` line of the patch,
so reviewers see where to fetch the series and what changed since the
previous version.
"""

from __future__ import annotations

from patchprep.documents import Document, Section
from patchprep.git.runner import GitRunner

SHORT_HASH_LEN = 10


def interdiff_title(prev_version: int, version: int) -> str:
    return f"Interdiff (v{prev_version}..v{version})"


def build_note(
    base_ref: str,
    web_url: str,
    head_hash: str,
    tag_name: str,
    version: int = 1,
    interdiff: str | None = None,
) -> Document:
    """Build the note document for `head_hash`."""
    short = head_hash[:SHORT_HASH_LEN]
    url = web_url.rstrip("/")

    doc = Document()
    links = doc.add_section(Section())
    links.add_field("Base Ref", base_ref)
    links.add_field("Web-Diff", f"{url}/commit/{short}")
    links.add_field("Checkout", f"git fetch {url} {tag_name} && git checkout {short}")

    if interdiff is not None and version >= 2:
        section = doc.add_section(Section(title=interdiff_title(version - 1, version) + ":"))
        section.add_text(interdiff)
    return doc


def write_note(runner: GitRunner, note: Document, commit: str = "HEAD") -> None:
    """Replace the note on `commit`."""
    runner.run("notes", "add", "-f", "-F", "-", commit, input=note.render())
