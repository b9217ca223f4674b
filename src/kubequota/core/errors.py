#!/usr/bin/env python3
"""
KUBEQUOTA ERRORS
----------------
Exception taxonomy shared by the parser, the invariant rules and the
validator.

ValidationFailure subclasses describe a template the user can fix and
re-submit. InfrastructureError describes an operational fault (missing or
broken schema, unserializable document) and is never rendered as an
'invalid template' diagnostic.

Author: KubeQuota Team
Date: 2026-01-16
"""

from typing import Any, List, Optional


class KubeQuotaError(Exception):
    """Base class for every error raised by KubeQuota."""


class ValidationFailure(KubeQuotaError):
    """A recoverable problem with the submitted template."""
    kind = None

    @property
    def message(self) -> str:
        return str(self)


class MalformedQuantity(ValidationFailure, ValueError):
    """A resource string does not match its family's grammar."""
    kind = "MALFORMED_QUANTITY"

    def __init__(self, raw: Any, family: str, reason: str = "", field: Optional[str] = None):
        self.raw = raw
        self.family = family
        self.reason = reason
        self.field = field
        detail = f"invalid {family} quantity {raw!r}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)

    @property
    def message(self) -> str:
        if self.field:
            return f"{self.field}: {self}"
        return str(self)


class MissingField(ValidationFailure):
    """A resource value required by autoscaling is absent."""
    kind = "MISSING_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required")


class DocumentShapeError(ValidationFailure):
    """A template level that must be a map holds something else."""
    kind = "DOCUMENT_SHAPE"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"'{path}' must be a map/object.")


class InvariantViolation(ValidationFailure):
    """At least one limit is lower than its request."""
    kind = "INVARIANT_VIOLATION"

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        summary = "requests is greater than limits"
        if self.violations:
            summary = f"{summary}: {'; '.join(self.violations)}"
        super().__init__(summary)


class InfrastructureError(KubeQuotaError):
    """Schema lookup, schema parsing or document serialization failed."""
