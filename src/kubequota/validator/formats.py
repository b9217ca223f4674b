#!/usr/bin/env python3
"""
KUBEQUOTA FORMAT PREDICATES
---------------------------
Boolean checkers for the custom JSON-schema formats 'cpu' and 'memory'.

The checkers are handed to the schema engine through a FormatChecker built
per validator, so no process-wide registry is touched.

Author: KubeQuota Team
Date: 2026-01-16
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional

from jsonschema import FormatChecker

CPU_FORMAT = "cpu"
MEMORY_FORMAT = "memory"

_CPU_MILLI = re.compile(r"[0-9.]+m")
_CPU_CORES = re.compile(r"[0-9.]+")
_MEMORY_BINARY = re.compile(r"[0-9]+(?:Ki|Mi|Gi|Ti|Pi)")


def is_valid_cpu_format(value: Any) -> bool:
    """'50m' and '0.05' style strings. Non-strings are left to the type checks."""
    if not isinstance(value, str):
        return True
    return bool(_CPU_MILLI.fullmatch(value) or _CPU_CORES.fullmatch(value))


def is_valid_memory_format(value: Any) -> bool:
    """Integer amounts with a binary suffix: '100Mi', '1Gi', '1Ti'."""
    if not isinstance(value, str):
        return True
    return bool(_MEMORY_BINARY.fullmatch(value))


DEFAULT_FORMATS: Dict[str, Callable[[Any], bool]] = {
    CPU_FORMAT: is_valid_cpu_format,
    MEMORY_FORMAT: is_valid_memory_format,
}


def build_format_checker(formats: Optional[Mapping[str, Callable[[Any], bool]]] = None) -> FormatChecker:
    """
    Returns a FormatChecker carrying the standard formats plus `formats`.
    Registering a name twice replaces the earlier predicate.
    """
    checker = FormatChecker()
    for name, predicate in (formats if formats is not None else DEFAULT_FORMATS).items():
        checker.checks(name)(predicate)
    return checker
