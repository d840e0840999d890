"""JSON-file storage for named palettes."""

import json
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path

DEFAULT_NAME = "Untitled palette"


@dataclass
class SavedPalette:
    id: str
    name: str
    colors: list[tuple[int, int, int]]
    created_at: float

    @classmethod
    def from_dict(cls, data: dict) -> "SavedPalette":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            colors=[tuple(int(c) for c in color) for color in data["colors"]],
            created_at=float(data["created_at"]),
        )


class PaletteStore:
    """
    Saved palettes kept as a list of records in a single JSON file.

    A missing or unreadable file behaves as an empty store; it is created on
    the first write.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> list[SavedPalette]:
        try:
            records = json.loads(self.path.read_text(encoding="utf-8"))
            return [SavedPalette.from_dict(r) for r in records]
        except (OSError, ValueError, KeyError, TypeError):
            return []

    def _write(self, palettes: list[SavedPalette]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([asdict(p) for p in palettes], indent=2), encoding="utf-8")

    def list_palettes(self) -> list[SavedPalette]:
        """All saved palettes, newest first."""
        return sorted(self._read(), key=lambda p: p.created_at, reverse=True)

    def get(self, palette_id: str) -> SavedPalette | None:
        return next((p for p in self._read() if p.id == palette_id), None)

    def save(self, colors: list[tuple[int, int, int]], name: str | None = None) -> SavedPalette:
        palettes = self._read()
        item = SavedPalette(
            id=uuid.uuid4().hex,
            name=(name or "").strip() or DEFAULT_NAME,
            colors=[tuple(int(c) for c in color) for color in colors],
            created_at=time.time(),
        )
        palettes.append(item)
        self._write(palettes)
        return item

    def delete(self, palette_id: str) -> None:
        self._write([p for p in self._read() if p.id != palette_id])

    def rename(self, palette_id: str, name: str) -> None:
        palettes = self._read()
        for p in palettes:
            if p.id == palette_id:
                p.name = name.strip() or p.name
        self._write(palettes)
