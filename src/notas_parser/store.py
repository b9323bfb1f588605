#!/usr/bin/env python3
"""
File and record stores.

LocalFileStore resolves document locations ("/uploads/nota.csv") to content on
disk; JSONRecordStore receives the result of a run and replaces its previous
records wholesale.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

from .exceptions import DocumentReadError, RecordStoreError
from .models import ExtractionResult, build_suppliers

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".pdf")
TEXT_ENCODINGS = ("utf-8-sig", "cp1252")


class LocalFileStore:
    """Maps document locations to files under a base directory."""

    def __init__(self, base_dir: Union[str, Path] = "."):
        self.base_dir = Path(base_dir)

    def resolve(self, location: str) -> Path:
        """A leading "/" is relative to base_dir unless the absolute path exists."""
        path = Path(location)
        if path.is_absolute() and path.exists():
            return path
        return self.base_dir / location.lstrip("/\\")

    def read_bytes(self, location: str) -> bytes:
        path = self.resolve(location)
        if not path.is_file():
            raise DocumentReadError(location, f"file not found at {path}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise DocumentReadError(location, str(e)) from e

    def read_text(self, location: str) -> str:
        """
        Read a text document.

        Args:
            location: Document location

        Returns:
            Decoded content; UTF-8 first, cp1252 as fallback
        """
        raw = self.read_bytes(location)
        for encoding in TEXT_ENCODINGS:
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError:
                logger.debug(f"{location} is not {encoding}")
        return raw.decode("utf-8", errors="replace")

    def local_path(self, location: str) -> str:
        path = self.resolve(location)
        if not path.is_file():
            raise DocumentReadError(location, f"file not found at {path}")
        return str(path)

    def list_documents(self) -> List[str]:
        """Locations of every .csv/.pdf directly under base_dir, sorted by name."""
        if not self.base_dir.is_dir():
            return []
        return sorted(
            f"/{entry.name}"
            for entry in self.base_dir.iterdir()
            if entry.is_file() and entry.suffix.lower() in SUPPORTED_EXTENSIONS
        )


class JSONRecordStore:
    """JSON file holding invoices, products and suppliers."""

    COLLECTIONS = ("invoices", "products", "suppliers")

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {name: [] for name in self.COLLECTIONS}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise RecordStoreError(f"Could not read {self.path}: expected a JSON object, got {type(data).__name__}")
        for name in self.COLLECTIONS:
            data.setdefault(name, [])
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RecordStoreError(f"Could not write {self.path}: {e}") from e

    def replace(self, result: ExtractionResult) -> Dict[str, int]:
        """
        Replace the stored records with a run's result.

        An empty result clears every collection. Keys other than the three
        collections are kept as they are.

        Returns:
            Count of records written per collection
        """
        data = self.load()
        if result.is_empty:
            for name in self.COLLECTIONS:
                data[name] = []
            logger.info("Empty result: record store cleared")
        else:
            data["invoices"] = [inv.to_dict() for inv in result.invoices]
            data["products"] = [prod.to_dict() for prod in result.products]
            data["suppliers"] = [sup.to_dict() for sup in build_suppliers(result.invoices)]
            logger.info(f"Record store updated with {len(result.invoices)} invoices and {len(result.products)} products")
        self._write(data)
        return {name: len(data[name]) for name in self.COLLECTIONS}
