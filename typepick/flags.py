"""Bitmask-to-name resolution for oracle flag enumerations.

Flag tables are plain ``name -> value`` mappings supplied by the type
checker, so nothing here depends on how many flags an oracle defines or
what their numeric values are. ``TYPE_FLAGS`` and ``SYMBOL_FLAGS`` mirror
the TypeScript compiler's ``TypeFlags`` and ``SymbolFlags`` enumerations
(composite members included) for checkers that bridge to it.
"""

from __future__ import annotations

import enum
from typing import Dict, Iterable, List, Mapping, Tuple, Type, Union

from .models import FlagSummary

FlagTable = Union[Mapping[str, int], Type[enum.Enum]]


TYPE_FLAGS: Dict[str, int] = {
    "Any": 1 << 0,
    "Unknown": 1 << 1,
    "String": 1 << 2,
    "Number": 1 << 3,
    "Boolean": 1 << 4,
    "Enum": 1 << 5,
    "BigInt": 1 << 6,
    "StringLiteral": 1 << 7,
    "NumberLiteral": 1 << 8,
    "BooleanLiteral": 1 << 9,
    "EnumLiteral": 1 << 10,
    "BigIntLiteral": 1 << 11,
    "ESSymbol": 1 << 12,
    "UniqueESSymbol": 1 << 13,
    "Void": 1 << 14,
    "Undefined": 1 << 15,
    "Null": 1 << 16,
    "Never": 1 << 17,
    "TypeParameter": 1 << 18,
    "Object": 1 << 19,
    "Union": 1 << 20,
    "Intersection": 1 << 21,
    "Index": 1 << 22,
    "IndexedAccess": 1 << 23,
    "Conditional": 1 << 24,
    "Substitution": 1 << 25,
    "NonPrimitive": 1 << 26,
    "TemplateLiteral": 1 << 27,
    "StringMapping": 1 << 28,
    # composites
    "Literal": (1 << 7) | (1 << 8) | (1 << 11) | (1 << 9),
    "Unit": (1 << 10) | (1 << 7) | (1 << 8) | (1 << 11) | (1 << 9)
    | (1 << 13) | (1 << 15) | (1 << 16),
    "StringOrNumberLiteral": (1 << 7) | (1 << 8),
    "Nullable": (1 << 15) | (1 << 16),
    "BooleanLike": (1 << 4) | (1 << 9),
    "StructuredType": (1 << 19) | (1 << 20) | (1 << 21),
    "UnionOrIntersection": (1 << 20) | (1 << 21),
}

SYMBOL_FLAGS: Dict[str, int] = {
    "None": 0,
    "FunctionScopedVariable": 1 << 0,
    "BlockScopedVariable": 1 << 1,
    "Property": 1 << 2,
    "EnumMember": 1 << 3,
    "Function": 1 << 4,
    "Class": 1 << 5,
    "Interface": 1 << 6,
    "ConstEnum": 1 << 7,
    "RegularEnum": 1 << 8,
    "ValueModule": 1 << 9,
    "NamespaceModule": 1 << 10,
    "TypeLiteral": 1 << 11,
    "ObjectLiteral": 1 << 12,
    "Method": 1 << 13,
    "Constructor": 1 << 14,
    "GetAccessor": 1 << 15,
    "SetAccessor": 1 << 16,
    "Signature": 1 << 17,
    "TypeParameter": 1 << 18,
    "TypeAlias": 1 << 19,
    "ExportValue": 1 << 20,
    "Alias": 1 << 21,
    "Prototype": 1 << 22,
    "ExportStar": 1 << 23,
    "Optional": 1 << 24,
    "Transient": 1 << 25,
    "Assignment": 1 << 26,
    "ModuleExports": 1 << 27,
    "All": -1,
    # composites
    "Enum": (1 << 8) | (1 << 7),
    "Variable": (1 << 0) | (1 << 1),
    "Accessor": (1 << 15) | (1 << 16),
    "Module": (1 << 9) | (1 << 10),
}


def is_single_bit(value: int) -> bool:
    """Return True when *value* is a non-zero power of two."""
    return value > 0 and (value & (value - 1)) == 0


def _table_items(table: FlagTable) -> Iterable[Tuple[str, int]]:
    if isinstance(table, type) and issubclass(table, enum.Enum):
        return ((name, member.value) for name, member in table.__members__.items())
    return table.items()


def collect_flag_names(table: FlagTable, flags: int) -> List[str]:
    """Names of every single-bit constant in *table* set in *flags*, sorted.

    Composite and alias constants are skipped; when two names share one
    bit, the first in table order is kept.
    """
    by_bit: Dict[int, str] = {}
    for name, value in _table_items(table):
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if not is_single_bit(value):
            continue
        if flags & value == 0:
            continue
        by_bit.setdefault(value, name)
    return sorted(by_bit.values())


def summarize_flags(table: FlagTable, flags: int) -> FlagSummary:
    return FlagSummary(flags=flags, names=tuple(collect_flag_names(table, flags)))
