"""JSON file export and import.

The store hands complete snapshots to a FileCollaborator and trusts whatever
it returns; JSON encoding and decoding for files happen here, not in the
store.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"


@runtime_checkable
class FileCollaborator(Protocol):
    """Writes snapshots to files and reads them back."""

    def export_to_json_file(self, data: dict[str, Any], filename: str) -> Path:
        ...

    async def import_from_json_file(self, file: str | Path) -> Any:
        ...


class JsonFileExporter:
    """Writes JSON files into an export directory and parses JSON files back.

    Example:
        exporter = JsonFileExporter("data/exports")
        path = exporter.export_to_json_file(snapshot, "mtnsyr-data-2024-01-31")
        payload = await exporter.import_from_json_file(path)
    """

    def __init__(self, export_dir: str | Path | None = None, indent: int = 2):
        if export_dir is None:
            export_dir = Path.cwd() / "data" / "exports"
        self._export_dir = Path(export_dir)
        self._indent = indent

    @property
    def export_dir(self) -> Path:
        return self._export_dir

    def resolve_path(self, filename: str) -> Path:
        """Map a bare filename to its location in the export directory."""
        name = Path(filename).name
        if not name:
            raise ValueError("Export filename must not be empty")
        if not name.endswith(JSON_SUFFIX):
            name += JSON_SUFFIX
        return self._export_dir / name

    def export_to_json_file(self, data: dict[str, Any], filename: str) -> Path:
        """Serialize data to <export_dir>/<filename>.json and return the path."""
        path = self.resolve_path(filename)
        content = json.dumps(data, indent=self._indent, ensure_ascii=False)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.debug(f"Exported {len(content)} characters to {path}")
        return path

    async def import_from_json_file(self, file: str | Path) -> Any:
        """Read and parse a JSON file without blocking the event loop."""
        path = Path(file)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)


__all__ = ["FileCollaborator", "JsonFileExporter", "JSON_SUFFIX"]
