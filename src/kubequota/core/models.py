#!/usr/bin/env python3
"""
KUBEQUOTA CORE MODELS
---------------------
Defines the fundamental data structures used across the KubeQuota engine.
These models represent a values template after it has been decoded into
the resource shape the invariant rules care about.

Author: KubeQuota Team
Date: 2026-01-16
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from kubequota.core.errors import DocumentShapeError


class ResourceFamily(str, Enum):
    """The two unit grammars a quantity can be parsed under."""
    CPU = "cpu"
    MEMORY = "memory"


class FailureKind(str, Enum):
    MALFORMED_QUANTITY = "MALFORMED_QUANTITY"
    MISSING_FIELD = "MISSING_FIELD"
    DOCUMENT_SHAPE = "DOCUMENT_SHAPE"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"


@dataclass(frozen=True)
class Quantity:
    """
    A parsed resource amount.

    CPU quantities are expressed in cores, memory quantities in bytes.
    """
    value: float                  # Canonical scalar after unit normalization
    family: ResourceFamily        # Grammar the raw string was parsed under
    raw: str = ""                 # The original string, kept for diagnostics


@dataclass
class ResourcePair:
    """
    The {limit, request} raw values for one dimension of one block.
    Values stay raw until the invariant checker parses them.
    """
    family: ResourceFamily
    limit: Optional[Any] = None
    request: Optional[Any] = None


@dataclass
class ResourceBlock:
    """
    The limits/requests x cpu/memory group for one container scope.

    `scope` is the dotted prefix of the block inside the template
    ('' for the primary container, 'envoyproxy' for the sidecar).
    """
    scope: str
    label: str = ""
    cpu: ResourcePair = field(default_factory=lambda: ResourcePair(ResourceFamily.CPU))
    memory: ResourcePair = field(default_factory=lambda: ResourcePair(ResourceFamily.MEMORY))

    def path(self, section: str, family: ResourceFamily) -> str:
        """Dotted template path of one value, e.g. 'envoyproxy.resources.limits.cpu'."""
        prefix = f"{self.scope}." if self.scope else ""
        return f"{prefix}resources.{section}.{family.value}"

    @classmethod
    def from_node(cls, node: Any, scope: str, label: str = "") -> "ResourceBlock":
        """
        Decodes a 'resources' mapping into a block.
        Missing levels are tolerated; present levels must be maps.
        """
        block = cls(scope=scope, label=label)
        resources_path = f"{scope}.resources" if scope else "resources"
        resources = _expect_map(node, resources_path)

        limits = _expect_map(resources.get("limits"), f"{resources_path}.limits")
        requests = _expect_map(resources.get("requests"), f"{resources_path}.requests")

        block.cpu.limit = limits.get("cpu")
        block.cpu.request = requests.get("cpu")
        block.memory.limit = limits.get("memory")
        block.memory.request = requests.get("memory")
        return block


@dataclass
class TemplateResources:
    """
    Typed view of the only template fields the invariant rules read.
    Built once per validation by `from_document`.
    """
    primary: ResourceBlock
    sidecar: ResourceBlock
    autoscaling_enabled: bool = False

    @classmethod
    def from_document(cls, document: Any) -> "TemplateResources":
        root = _expect_map(document, "(root)")

        envoyproxy = _expect_map(root.get("envoyproxy"), "envoyproxy")
        autoscaling = _expect_map(root.get("autoscaling"), "autoscaling")

        return cls(
            primary=ResourceBlock.from_node(root.get("resources"), scope="", label=""),
            sidecar=ResourceBlock.from_node(envoyproxy.get("resources"), scope="envoyproxy", label="Envoyproxy"),
            # Only a literal boolean switches the invariant rules on
            autoscaling_enabled=autoscaling.get("enabled") is True,
        )


@dataclass
class ValidationOutcome:
    """
    Verdict of one validation call plus its ordered diagnostics.
    """
    valid: bool
    errors: List[str] = field(default_factory=list)
    kind: Optional[FailureKind] = None

    @property
    def message(self) -> str:
        return "\n".join(self.errors)

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls) -> "ValidationOutcome":
        return cls(valid=True)

    @classmethod
    def failed(cls, kind: FailureKind, *errors: str) -> "ValidationOutcome":
        return cls(valid=False, errors=list(errors), kind=kind)


def _expect_map(node: Any, path: str) -> Dict[str, Any]:
    """Returns the node as a mapping; None becomes an empty map."""
    if node is None:
        return {}
    if not isinstance(node, dict):
        raise DocumentShapeError(path)
    return node
