"""Local vault of Markdown notes."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

from .errors import DecodeError
from .utils import safe_name


def note_title(filename: str) -> str:
    """Strip the last extension from ``filename``.

    ``"notes.txt"`` becomes ``"notes"``; a dot file keeps its name.
    """
    title = re.sub(r"\.[^/.]+$", "", filename or "")
    return title or filename


class NoteVault:
    """Directory holding notes as ``<title>.md`` files."""

    def __init__(self, root: Path | str):
        self.root = Path(root).expanduser()

    def create_note(self, name: str, content: bytes) -> Path:
        """Create a new note from downloaded ``content``.

        The bytes are decoded as UTF-8 and written verbatim.  An existing note
        is never overwritten: :class:`FileExistsError` is raised instead.
        """
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"{name} is not UTF-8 text") from e
        path = self.root / f"{safe_name(note_title(name))}.md"
        self.root.mkdir(parents=True, exist_ok=True)
        with open(path, "x", encoding="utf-8", newline="") as fh:
            fh.write(text)
        return path

    def iter_notes(self) -> List[Path]:
        """Return all ``.md`` files under the vault recursively."""
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.rglob("*.md") if p.is_file())
