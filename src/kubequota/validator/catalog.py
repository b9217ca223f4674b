#!/usr/bin/env python3
"""
KUBEQUOTA SCHEMA CATALOG
------------------------
Named lookup of JSON schemas stored as '<name>.json' files in one directory.
Schemas are read fresh on every load so edits on disk take effect at once.

Author: KubeQuota Team
Date: 2026-01-16
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from kubequota.core.errors import InfrastructureError

logger = logging.getLogger("kubequota.catalog")

SCHEMA_DIR_ENV = "KUBEQUOTA_SCHEMA_DIR"


def default_schema_dir() -> Path:
    """
    Locates the schema directory.
    Order: $KUBEQUOTA_SCHEMA_DIR, PyInstaller bundle, packaged catalog.
    """
    env_dir = os.getenv(SCHEMA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    # Support for PyInstaller binary environments via _MEIPASS
    bundle_dir = getattr(sys, "_MEIPASS", None)
    if bundle_dir and (Path(bundle_dir) / "catalog").is_dir():
        return Path(bundle_dir) / "catalog"

    return Path(__file__).resolve().parent.parent / "catalog"


class SchemaCatalog:
    """Filesystem-backed schema store."""

    def __init__(self, schema_dir: Optional[Union[str, Path]] = None):
        self.schema_dir = Path(schema_dir).resolve() if schema_dir else default_schema_dir()

    def path_for(self, name: str) -> Path:
        # A schema name is a bare file stem, never a path
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise InfrastructureError(f"Invalid schema name '{name}'")
        return self.schema_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Dict[str, Any]:
        """
        Reads and parses one schema.

        Raises:
            InfrastructureError: unreadable file or malformed JSON.
        """
        path = self.path_for(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                schema = json.load(f)
        except OSError as e:
            logger.error(f"Schema file error for '{name}': {e}")
            raise InfrastructureError(f"Unable to read schema '{name}' from {path}: {e}") from e
        except json.JSONDecodeError as e:
            logger.error(f"Malformed schema JSON in {path}: {e}")
            raise InfrastructureError(f"Schema '{name}' is not valid JSON: {e}") from e

        if not isinstance(schema, dict):
            raise InfrastructureError(f"Schema '{name}' must be a JSON object")
        return schema

    def names(self) -> List[str]:
        if not self.schema_dir.is_dir():
            return []
        return sorted(p.stem for p in self.schema_dir.glob("*.json") if p.is_file())
