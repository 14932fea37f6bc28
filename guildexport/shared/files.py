"""Text artifact load/save helpers.

These are the only points where the tool touches the filesystem for reports
and snapshots. Both helpers release the file handle on every exit path and
report failures through their return value instead of raising.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading a text artifact.

    `cancelled` is set when no file was chosen; it is not a failure.
    """

    path: Path | None
    content: str | None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.content is not None


def load_text(path: Path | str | None) -> LoadResult:
    """Read a UTF-8 text file.

    Args:
        path: File to read, or None when the user picked nothing.

    Returns:
        LoadResult with the content, or with `content=None` on cancel/failure.
    """
    if path is None:
        return LoadResult(path=None, content=None, cancelled=True)

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        logger.error("Load failed: %s (%s)", path, exc)
        return LoadResult(path=None, content=None, cancelled=False)
    return LoadResult(path=path, content=content)


def save_text(path: Path | str | None, content: str) -> bool:
    """Write `content` to `path` as UTF-8.

    A None path means the user cancelled the save; that counts as done.

    Returns:
        True when the content was written or the save was cancelled.
    """
    if path is None:
        return True

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as exc:
        logger.error("Save failed: %s (%s)", path, exc)
        return False
    return True
