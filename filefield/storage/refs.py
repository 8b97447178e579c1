from __future__ import annotations

import re
from pathlib import PurePath

from ulid import ULID

from filefield.models.file import FileMode

_REF_PATTERN = re.compile(
    r"(?P<mode>" + "|".join(re.escape(m.value) for m in FileMode) + r"):file:(?P<filename>[^\\/:\n]+)"
)
_UNSAFE_CHARS = re.compile(r"[^a-z0-9]+")


def format_file_ref(mode: FileMode | str, filename: str) -> str:
    mode_value = mode.value if isinstance(mode, FileMode) else mode
    return f"{mode_value}:file:{filename}"


def parse_file_ref(ref: str) -> tuple[FileMode, str] | None:
    match = _REF_PATTERN.fullmatch(ref)
    if match is None:
        return None
    return FileMode(match["mode"]), match["filename"]


def generate_safe_filename(filename: str) -> str:
    """Build a unique stored name: ``<slug>-<ULID><ext>``.

    The result never contains path separators or colons, so it can always be
    embedded in a file ref.
    """
    path = PurePath(filename.replace("\\", "/"))
    stem = _UNSAFE_CHARS.sub("-", path.stem.lower()).strip("-") or "file"
    ext = _UNSAFE_CHARS.sub("", path.suffix.lower())
    suffix = f".{ext}" if ext else ""
    return f"{stem}-{ULID()}{suffix}"
