from __future__ import annotations

from pathlib import Path
from typing import Optional


class LocalDirectorySource:
    """FileSourcePort over a project checkout on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def read(self, path: str) -> Optional[str]:
        target = self.root / path
        if not target.is_file():
            return None
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None
