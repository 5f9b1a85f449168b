"""Filesystem helpers: safe path components and file writes."""

import re
from pathlib import Path
from typing import Optional, Set, Union

DEFAULT_MAX_LENGTH = 50

_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_UNDERSCORE_RUNS = re.compile(r'_+')


def get_safe_filename(name: Optional[str], max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Turn an arbitrary name into a single safe path component.

    Characters illegal in file names become underscores, underscore runs
    collapse to one, and leading/trailing underscores are stripped. The result
    is cut to ``max_length`` characters, and an underscore left dangling by the
    cut is stripped as well. Applying the function twice changes nothing.

    Args:
        name: Raw name (attachment file name, readable id, project code)
        max_length: Maximum length of the result

    Returns:
        Sanitized name, possibly empty
    """
    if not name:
        return ""

    safe_name = _ILLEGAL_CHARS.sub('_', str(name))
    safe_name = _UNDERSCORE_RUNS.sub('_', safe_name)
    safe_name = safe_name.strip('_')

    if len(safe_name) > max_length:
        safe_name = safe_name[:max_length].rstrip('_')

    return safe_name


def unique_filename(name: str, taken: Set[str]) -> str:
    """
    Return ``name``, or ``name`` with a ``_<n>`` counter before its suffix, that is not in ``taken``.

    Names are compared case-insensitively so case-folding filesystems do not
    merge two attachments; the lowercased choice is added to ``taken``.
    """
    candidate = name
    counter = 1
    while candidate.lower() in taken:
        path = Path(name)
        candidate = f"{path.stem}_{counter}{path.suffix}"
        counter += 1
    taken.add(candidate.lower())
    return candidate


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create ``path`` (and parents) if needed; existing directories are fine."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_text_file(path: Union[str, Path], text: str) -> Path:
    """Write UTF-8 text to ``path``, replacing any previous file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


__all__ = [
    'DEFAULT_MAX_LENGTH',
    'get_safe_filename',
    'unique_filename',
    'ensure_directory',
    'write_text_file'
]
