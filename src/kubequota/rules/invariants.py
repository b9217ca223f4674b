#!/usr/bin/env python3
"""
KUBEQUOTA INVARIANT RULES - Limits vs Requests
----------------------------------------------
The ResourceInvariantChecker enforces the cross-field rule that schema
validation cannot express: when autoscaling is on, the primary container
and the envoyproxy sidecar must both declare cpu/memory limits and requests,
and every limit must be at least its request.

Author: KubeQuota Team
Date: 2026-01-16
"""

import logging
import math
from typing import Any, Dict, List, Tuple

from kubequota.core.errors import InvariantViolation, MalformedQuantity, MissingField, ValidationFailure
from kubequota.core.models import (
    FailureKind,
    Quantity,
    ResourceBlock,
    ResourceFamily,
    TemplateResources,
    ValidationOutcome,
)
from kubequota.quantity.parser import to_quantity

logger = logging.getLogger("kubequota.rules")

# Display names used in '<Field> is required' diagnostics
_FAMILY_LABELS = {ResourceFamily.CPU: "CPU", ResourceFamily.MEMORY: "Memory"}
_SECTION_LABELS = {"limits": "limit", "requests": "requests"}

# Fixed check order inside a block
_REQUIRED_ORDER = [
    ("limits", ResourceFamily.CPU),
    ("limits", ResourceFamily.MEMORY),
    ("requests", ResourceFamily.CPU),
    ("requests", ResourceFamily.MEMORY),
]

ParsedBlock = Dict[Tuple[str, ResourceFamily], Quantity]


class ResourceInvariantChecker:
    """
    Validates limit >= request across the primary and sidecar blocks.
    Holds no per-call state, so one instance can serve every validation.
    """

    def check(self, document: Any, autoscaling_enabled: bool) -> ValidationOutcome:
        """
        Runs the invariant rules against a decoded template.

        Autoscaling off means the workload is not required to declare
        limits and requests, so nothing is checked.
        """
        if not autoscaling_enabled:
            return ValidationOutcome.ok()

        try:
            resources = TemplateResources.from_document(document)
            blocks = [resources.primary, resources.sidecar]

            # --- RULE 1: Presence (first missing field wins) ---
            self._require_fields(blocks)

            # --- RULE 2: Every value parses under its grammar ---
            parsed = [self._parse_block(block) for block in blocks]

            # --- RULE 3: limit >= request, per block and dimension ---
            self._compare(blocks, parsed)

        except ValidationFailure as e:
            logger.info(f"Invariant check failed: {e.message}")
            return ValidationOutcome.failed(FailureKind(e.kind), e.message)

        return ValidationOutcome.ok()

    def check_document(self, document: Any) -> ValidationOutcome:
        """Same as check(), with the flag read from autoscaling.enabled."""
        try:
            enabled = TemplateResources.from_document(document).autoscaling_enabled
        except ValidationFailure as e:
            return ValidationOutcome.failed(FailureKind(e.kind), e.message)
        return self.check(document, enabled)

    def _require_fields(self, blocks: List[ResourceBlock]):
        for block in blocks:
            for section, family in _REQUIRED_ORDER:
                if self._raw_value(block, section, family) is None:
                    raise MissingField(self._field_name(block, section, family))

    def _parse_block(self, block: ResourceBlock) -> ParsedBlock:
        parsed = {}
        for section, family in _REQUIRED_ORDER:
            raw = self._raw_value(block, section, family)
            try:
                parsed[(section, family)] = to_quantity(raw, family)
            except MalformedQuantity as e:
                e.field = block.path(section, family)
                raise
        return parsed

    def _compare(self, blocks: List[ResourceBlock], parsed: List[ParsedBlock]):
        violations = []
        for block, quantities in zip(blocks, parsed):
            for family in (ResourceFamily.CPU, ResourceFamily.MEMORY):
                limit = quantities[("limits", family)]
                request = quantities[("requests", family)]
                if self._exceeds(request, limit):
                    scope = block.scope or "resources"
                    violations.append(
                        f"{scope} {family.value} (limit {limit.raw} < request {request.raw})"
                    )

        if violations:
            raise InvariantViolation(violations)

    @staticmethod
    def _exceeds(request: Quantity, limit: Quantity) -> bool:
        # '1000m' and '1' must compare equal despite float rounding;
        # an absolute tolerance keeps one byte below a request a violation
        if math.isclose(limit.value, request.value, rel_tol=0.0, abs_tol=1e-9):
            return False
        return limit.value < request.value

    @staticmethod
    def _raw_value(block: ResourceBlock, section: str, family: ResourceFamily) -> Any:
        pair = block.cpu if family is ResourceFamily.CPU else block.memory
        return pair.limit if section == "limits" else pair.request

    @staticmethod
    def _field_name(block: ResourceBlock, section: str, family: ResourceFamily) -> str:
        name = f"{_FAMILY_LABELS[family]} {_SECTION_LABELS[section]}"
        return f"{block.label} {name}" if block.label else name
