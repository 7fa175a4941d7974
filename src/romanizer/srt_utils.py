"""
SRT document splitting, reading, writing and output naming.
"""

import logging
import re
from pathlib import Path

from .models import BLOCK_SEPARATOR, Block

logger = logging.getLogger("romanizer")

# A blank line: a line break, optional whitespace (including further line breaks), a line break
_BLOCK_DELIM_RE = re.compile(r"\n\s*\n")

SUBTITLE_EXTENSIONS = {".srt"}
DEFAULT_OUTPUT_SUFFIX = "_hinglish"


def split_blocks(document: str) -> list[Block]:
    """Split a subtitle document into blocks on blank lines.

    The document is trimmed first; block text is otherwise kept as-is.
    An empty or whitespace-only document gives no blocks.
    """
    trimmed = document.strip()
    if not trimmed:
        return []
    return [Block(text=part) for part in _BLOCK_DELIM_RE.split(trimmed)]


def join_blocks(blocks: list[Block]) -> str:
    """Serialize blocks back into a document, one blank line between them."""
    return BLOCK_SEPARATOR.join(b.text for b in blocks)


def is_subtitle_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in SUBTITLE_EXTENSIONS


def read_document(path: str | Path) -> str:
    """Read a subtitle file as UTF-8 text."""
    with open(path, encoding="utf-8") as f:
        return f.read()


def write_document(text: str, path: str | Path) -> None:
    """Write a subtitle document as UTF-8 text."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def derive_output_name(name: str | None, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> str:
    """Build the converted file name: base name + suffix + original extension.

    >>> derive_output_name("episode01.srt")
    'episode01_hinglish.srt'
    """
    if not name:
        return f"converted{suffix}.srt"
    p = Path(name)
    stem = p.stem or "converted"
    ext = p.suffix or ".srt"
    return f"{stem}{suffix}{ext}"
