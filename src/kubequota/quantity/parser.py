#!/usr/bin/env python3
"""
KUBEQUOTA QUANTITY PARSER - The Scale
-------------------------------------
Turns Kubernetes resource strings ('50m', '0.05', '100Mi', '1e3', '1,000')
into canonical floats: cores for CPU, bytes for memory.

Each family is described by one anchored pattern that splits the input into
(numeric literal, unit suffix) and one conversion table that gives the suffix
its scale. Supporting a new unit is a table edit.

Author: KubeQuota Team
Date: 2026-01-16
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Union

from kubequota.core.errors import MalformedQuantity
from kubequota.core.models import Quantity, ResourceFamily

# Digits with optional comma grouping / decimal point, then an optional exponent
_LITERAL = r"[0-9.,]+(?:[eE][+-]?[0-9]+)?"


@dataclass(frozen=True)
class ResourceGrammar:
    """Pattern + unit table for one resource family."""
    family: ResourceFamily
    pattern: re.Pattern
    conversions: Dict[str, float]


CPU_GRAMMAR = ResourceGrammar(
    family=ResourceFamily.CPU,
    pattern=re.compile(rf"({_LITERAL})(m?)"),
    conversions={
        "m": 0.001,
    },
)

MEMORY_GRAMMAR = ResourceGrammar(
    family=ResourceFamily.MEMORY,
    pattern=re.compile(rf"({_LITERAL})(Ei|Pi|Ti|Gi|Mi|Ki|E|P|T|G|M|K)?"),
    conversions={
        "E": float(1000 ** 6),
        "P": float(1000 ** 5),
        "T": float(1000 ** 4),
        "G": float(1000 ** 3),
        "M": float(1000 ** 2),
        "K": float(1000),
        "Ei": float(1024 ** 6),
        "Pi": float(1024 ** 5),
        "Ti": float(1024 ** 4),
        "Gi": float(1024 ** 3),
        "Mi": float(1024 ** 2),
        "Ki": float(1024),
    },
)

GRAMMARS = {
    ResourceFamily.CPU: CPU_GRAMMAR,
    ResourceFamily.MEMORY: MEMORY_GRAMMAR,
}


def parse_float(literal: str) -> float:
    """
    Parses a numeric literal that may carry comma grouping ('23,120,123')
    or scientific notation ('1.5e3', '2E-2').

    Raises:
        ValueError: when the literal is not a number once commas are removed.
    """
    text = literal.replace(",", "")

    pos = -1
    for i, char in enumerate(text):
        if char in "eE":
            pos = i
            break

    if pos < 0:
        return float(text)

    base = float(text[:pos])
    exponent = int(text[pos + 1:])
    try:
        return base * (10.0 ** exponent)
    except OverflowError:
        raise ValueError(f"exponent {exponent} is out of range")


def parse_quantity(raw: Union[str, int, float], family: Union[ResourceFamily, str]) -> float:
    """
    Parses `raw` under the grammar of `family` and returns the canonical value.

    Raises:
        MalformedQuantity: when the string does not fit the grammar, the
            literal is not a number, or the suffix has no conversion.
    """
    return to_quantity(raw, family).value


def to_quantity(raw: Union[str, int, float], family: Union[ResourceFamily, str]) -> Quantity:
    """Same as parse_quantity, but keeps the family and raw text."""
    family = ResourceFamily(family)
    grammar = GRAMMARS[family]
    text = _as_text(raw, family)

    match = grammar.pattern.fullmatch(text)
    if not match:
        raise MalformedQuantity(raw, family.value, f"expected pattern {grammar.pattern.pattern}")

    literal, suffix = match.group(1), match.group(2) or ""

    try:
        number = parse_float(literal)
    except ValueError as e:
        raise MalformedQuantity(raw, family.value, str(e)) from e

    if suffix:
        if suffix not in grammar.conversions:
            raise MalformedQuantity(raw, family.value, f"unknown unit '{suffix}'")
        number *= grammar.conversions[suffix]

    return Quantity(value=number, family=family, raw=text)


def cpu_to_number(raw: Union[str, int, float]) -> float:
    """CPU quantity in cores."""
    return parse_quantity(raw, ResourceFamily.CPU)


def memory_to_number(raw: Union[str, int, float]) -> float:
    """Memory quantity in bytes."""
    return parse_quantity(raw, ResourceFamily.MEMORY)


def _as_text(raw: Any, family: ResourceFamily) -> str:
    # YAML templates frequently carry 'cpu: 1' as a number
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise MalformedQuantity(raw, family.value, "expected a string or a number")
    if isinstance(raw, float):
        return repr(raw)
    return str(raw).strip()
