#!/usr/bin/env python3
"""
KUBEQUOTA VALIDATOR - The Judge
-------------------------------
The TemplateValidator is the single entry point for checking a values
template. It runs the named JSON schema (with the cpu/memory format
predicates plugged in) and, when the structure holds, hands the template
to the invariant rules.

Author: KubeQuota Team
Date: 2026-01-16
"""

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from jsonschema import SchemaError
from jsonschema import ValidationError as SchemaValidationError
from jsonschema.validators import validator_for

from kubequota.core.errors import InfrastructureError, ValidationFailure
from kubequota.core.models import FailureKind, TemplateResources, ValidationOutcome
from kubequota.rules.invariants import ResourceInvariantChecker
from kubequota.validator.catalog import SchemaCatalog
from kubequota.validator.formats import CPU_FORMAT, DEFAULT_FORMATS, MEMORY_FORMAT, build_format_checker

# Standardized logging for audit trails
logger = logging.getLogger("kubequota.validator")

CPU_PATTERN = '"50m" or "0.05"'
MEMORY_PATTERN = '"100Mi" or "1Gi" or "1Ti"'

# Friendlier text for format violations, keyed by format name
FORMAT_HINTS = {
    CPU_FORMAT: f"Format should be like {CPU_PATTERN}",
    MEMORY_FORMAT: f"Format should be like {MEMORY_PATTERN}",
}


class TemplateValidator:
    """
    Schema + invariant validation for values templates.

    Format predicates are injected per instance instead of being registered
    in a process-wide table, so validators with different predicate sets can
    coexist.
    """

    def __init__(self, catalog: Optional[SchemaCatalog] = None,
                 formats: Optional[Mapping[str, Callable[[Any], bool]]] = None,
                 checker: Optional[ResourceInvariantChecker] = None):
        """
        Args:
            catalog: Where named schemas are looked up.
            formats: Format name -> predicate. Defaults to cpu/memory.
            checker: The invariant rules run after schema validation.
        """
        self.catalog = catalog or SchemaCatalog()
        self.formats = dict(DEFAULT_FORMATS if formats is None else formats)
        self.checker = checker or ResourceInvariantChecker()

    def validate_template(self, document: Any, schema_name: str) -> ValidationOutcome:
        """
        Validates `document` against the schema called `schema_name`.

        A template kind with no schema has no declared constraints and is
        accepted as-is.

        Raises:
            InfrastructureError: the schema or the document could not be
                loaded; this is an operational fault, not a verdict.
        """
        # --- STEP 1: Schema Discovery ---
        if not self.catalog.exists(schema_name):
            logger.info(f"No schema '{schema_name}' in {self.catalog.schema_dir}. Skipping validation.")
            return ValidationOutcome.ok()

        # --- STEP 2: Engine Setup ---
        format_checker = build_format_checker(self.formats)
        schema = self.catalog.load(schema_name)
        payload = self._normalize(document)

        validator_cls = validator_for(schema)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as e:
            logger.error(f"Schema '{schema_name}' is invalid: {e.message}")
            raise InfrastructureError(f"Schema '{schema_name}' is invalid: {e.message}") from e

        engine = validator_cls(schema, format_checker=format_checker)

        # --- STEP 3: Structural Validation ---
        errors = list(engine.iter_errors(payload))
        if errors:
            messages = self.describe_errors(errors)
            logger.info(f"Template failed schema '{schema_name}' with {len(messages)} error(s)")
            return ValidationOutcome.failed(FailureKind.SCHEMA_VIOLATION, *messages)

        # --- STEP 4: Semantic Invariants ---
        try:
            enabled = TemplateResources.from_document(payload).autoscaling_enabled
        except ValidationFailure as e:
            return ValidationOutcome.failed(FailureKind(e.kind), e.message)

        return self.checker.check(payload, enabled)

    def describe_errors(self, errors: Iterable[SchemaValidationError]) -> List[str]:
        """Renders engine errors as '<field>: <message>' lines."""
        messages = []
        for error in errors:
            field = self.field_path(error)
            hint = None
            if error.validator == "format":
                hint = FORMAT_HINTS.get(error.validator_value)

            if hint:
                messages.append(f"{field}: {hint}")
            else:
                messages.append(f"{field}: {error.message}")
        return messages

    @staticmethod
    def field_path(error: SchemaValidationError) -> str:
        parts = [str(p) for p in error.absolute_path]
        return ".".join(parts) if parts else "(root)"

    @staticmethod
    def _normalize(document: Any) -> Dict[str, Any]:
        """Round-trips the template through JSON so ruamel/YAML types become plain data."""
        try:
            return json.loads(json.dumps(document))
        except (TypeError, ValueError) as e:
            logger.error(f"Error in marshalling template: {e}")
            raise InfrastructureError(f"Template is not serializable: {e}") from e
