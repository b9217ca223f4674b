#!/usr/bin/env python3
"""
KUBEQUOTA ENGINE - The Auditor
------------------------------
The TemplateAuditEngine loads values templates (YAML or JSON) from a
workspace, runs each one through the TemplateValidator and turns the
outcome into a report row the CLI can render.

Author: KubeQuota Team
Date: 2026-01-16
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from kubequota.core.errors import InfrastructureError
from kubequota.validator.catalog import SchemaCatalog
from kubequota.validator.validator import TemplateValidator

logger = logging.getLogger("kubequota.engine")


class TemplateParseError(Exception):
    """A template file is unreadable or not valid YAML/JSON."""


class TemplateAuditEngine:
    """
    Batch driver around TemplateValidator.
    Every file produces exactly one report, errors included.
    """

    def __init__(self, workspace_path: Union[str, Path],
                 schema_dir: Optional[Union[str, Path]] = None,
                 validator: Optional[TemplateValidator] = None):
        self.workspace = Path(workspace_path).resolve()
        self.catalog = SchemaCatalog(schema_dir)
        self.validator = validator or TemplateValidator(self.catalog)
        self.yaml = YAML(typ="safe")

    def load_template(self, path: Path) -> Any:
        """Reads one template. JSON by extension, YAML otherwise."""
        try:
            raw_text = path.read_text(encoding="utf-8-sig")
        except (UnicodeDecodeError, OSError) as e:
            raise TemplateParseError(f"Unable to read {path.name}: {e}") from e

        if not raw_text.strip():
            return {}

        try:
            if path.suffix.lower() == ".json":
                return json.loads(raw_text)
            document = self.yaml.load(raw_text)
        except (json.JSONDecodeError, YAMLError) as e:
            raise TemplateParseError(str(e)) from e

        return {} if document is None else document

    def audit_file(self, relative_path: Union[str, Path], schema_name: str) -> Dict[str, Any]:
        """Validates a single template file against `schema_name`."""
        full_path = (self.workspace / relative_path).resolve()

        if not full_path.is_file():
            return self._file_error(relative_path, schema_name, "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            document = self.load_template(full_path)
        except TemplateParseError as e:
            logger.warning(f"Unable to parse {relative_path}: {e}")
            return self._file_error(relative_path, schema_name, "PARSE_ERROR", str(e))

        try:
            outcome = self.validator.validate_template(document, schema_name)
        except InfrastructureError as e:
            logger.error(f"Error processing {relative_path}: {e}")
            return self._file_error(relative_path, schema_name, "ENGINE_ERROR", str(e))

        return {
            "file_path": str(relative_path),
            "schema": schema_name,
            "status": "VALID" if outcome.valid else "INVALID",
            "success": outcome.valid,
            "failure_kind": outcome.kind.value if outcome.kind else None,
            "errors": list(outcome.errors),
            "timestamp": time.time(),
        }

    def scan_directory(self, schema_name: str, extension: str = ".yaml", max_depth: int = 10,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """
        Recursively audits every template under the workspace.
        """
        try:
            max_depth = int(max_depth)
        except (ValueError, TypeError):
            logger.warning(f"Invalid max_depth '{max_depth}'. Falling back to default: 10")
            max_depth = 10

        all_files = self.discover(extension, max_depth)
        total_files = len(all_files)
        reports = []

        for processed, file_path in enumerate(all_files, start=1):
            rel_path = str(file_path.relative_to(self.workspace))
            reports.append(self.audit_file(rel_path, schema_name))
            if progress_callback:
                progress_callback(processed, total_files)

        return reports

    def discover(self, extension: str = ".yaml", max_depth: int = 10) -> List[Path]:
        """Template files under the workspace (case-insensitive extension, no symlinks)."""
        wanted = extension.lower()
        found = set()
        for candidate in self.workspace.rglob("*"):
            if candidate.suffix.lower() != wanted:
                continue
            if not candidate.is_file() or candidate.is_symlink():
                continue
            # Recursion depth check
            if len(candidate.relative_to(self.workspace).parts) > max_depth:
                continue
            found.add(candidate)
        return sorted(found)

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Aggregate counters for the final report panel."""
        if not reports:
            return {
                "total_files": 0, "success_rate": 0, "valid": 0,
                "invalid": 0, "system_errors": 0
            }

        total = len(reports)
        valid = sum(1 for r in reports if r.get("success", False))
        invalid = sum(1 for r in reports if r.get("status") == "INVALID")
        system_errors = sum(1 for r in reports if r.get("status") in ("ENGINE_ERROR", "PARSE_ERROR", "FILE_NOT_FOUND"))

        return {
            "total_files": total,
            "success_rate": valid / total,
            "valid": valid,
            "invalid": invalid,
            "system_errors": system_errors,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S")
        }

    def _file_error(self, path: Union[str, Path], schema_name: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": str(path), "schema": schema_name, "status": status,
            "success": False, "failure_kind": None, "errors": [error],
            "timestamp": time.time()
        }
