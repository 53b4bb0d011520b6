"""
Log folder enumeration.
"""

from pathlib import Path
from typing import Union


def get_files(root: Union[str, Path]) -> list[Path]:
    """
    List the entries directly under a folder.

    Args:
        root: Folder to list (not searched recursively)

    Returns:
        Full paths of the entries, sorted by name

    Raises:
        OSError: If the folder cannot be read (missing, not a directory, ...)
    """
    root = Path(root)
    return sorted(root.iterdir(), key=lambda p: p.name)
