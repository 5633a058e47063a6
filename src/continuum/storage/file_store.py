from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import aiofiles


class FileStore:
    """Directory of small JSON documents, each replaced atomically on write."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative_path: str | Path) -> Path:
        return self.base_dir.joinpath(relative_path)

    def read_text(self, relative_path: str | Path) -> str | None:
        """Return the document's text, or ``None`` if it was never written."""

        document = self.resolve(relative_path)
        if not document.exists():
            return None
        return document.read_text(encoding="utf-8")

    async def write_json(self, relative_path: str | Path, data: Any) -> Path:
        return await self.write_text(relative_path, json.dumps(data, ensure_ascii=False, indent=2))

    async def write_text(self, relative_path: str | Path, content: str) -> Path:
        document = self.resolve(relative_path)
        document.parent.mkdir(parents=True, exist_ok=True)
        await self._replace(document, content)
        return document

    async def _replace(self, document: Path, content: str) -> None:
        staging = document.with_suffix(document.suffix + ".tmp")
        async with aiofiles.open(staging, "w", encoding="utf-8") as handle:
            await handle.write(content)
        os.replace(staging, document)
