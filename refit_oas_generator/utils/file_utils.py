"""
File utilities for the OAS generator.

This module provides the file and directory operations used when writing
generated C# sources to disk.
"""

import os
import stat
import tempfile
from pathlib import Path

LINE_ENDING = "\n"


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF.

    Args:
        text: Text with arbitrary line endings.

    Returns:
        Text that only uses ``\\n`` as line terminator.
    """
    return text.replace("\r\n", LINE_ENDING).replace("\r", LINE_ENDING)


def ensure_directory(directory: Path) -> None:
    """Ensure that a directory exists.

    Args:
        directory: Path to the directory to create.
    """
    directory.mkdir(parents=True, exist_ok=True)


def _target_mode(path: Path) -> int:
    """Permission bits a plain write to ``path`` would leave on the file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_text_atomic(path: Path, content: str) -> int:
    """Write text to a file so that readers never observe a partial file.

    The content is written to a temporary file in the destination directory
    and then moved over the destination with :func:`os.replace`. The file
    keeps the permissions of an existing destination, or gets the default
    ones of a new file under the current umask.

    Args:
        path: Destination file path.
        content: Text to write, line endings are normalized to LF.

    Returns:
        Number of bytes written.
    """
    path = Path(path)
    directory = path.parent
    ensure_directory(directory)

    data = normalize_line_endings(content).encode("utf-8")
    mode = _target_mode(path)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.chmod(temp_name, mode)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise

    return len(data)
