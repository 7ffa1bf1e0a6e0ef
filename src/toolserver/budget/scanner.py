"""Detection of an existing budget declaration in a cloned repository."""

import logging
from pathlib import Path
from typing import Iterator

from src.toolserver.budget.declarations import DECLARATION_EXTENSION

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = frozenset({".git", ".terraform"})


def iter_declaration_files(root: Path, extension: str = DECLARATION_EXTENSION) -> Iterator[Path]:
    """Yield every declaration file under ``root``, outside git/terraform metadata."""
    for path in sorted(root.rglob(f"*{extension}")):
        relative_parts = path.relative_to(root).parts
        if any(part in SKIPPED_DIRECTORIES for part in relative_parts[:-1]):
            continue
        if path.is_file():
            yield path


def has_declaration(root: Path, marker: str, extension: str = DECLARATION_EXTENSION) -> bool:
    """Return True if any declaration file under ``root`` contains ``marker``.

    The whole tree is scanned on every call; the first hit wins.
    """
    for path in iter_declaration_files(root, extension):
        content = path.read_text(encoding="utf-8", errors="replace")
        if marker in content:
            logger.info(
                "Existing declaration found",
                extra={"file": str(path.relative_to(root)), "marker": marker},
            )
            return True
    return False
