"""Lookup tables used by the type analyzer.

Two read-only tables back every mapping decision:

- built-in table, keyed by bare type name (``int``, ``list``, ``Any`` ...)
- library table, keyed by ``(module, name)`` (``datetime.datetime`` ...)

Both live behind ``TypeTables`` so the analyzer never cares whether the data
came from the defaults below or from a JSON file.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

CONFIDENCE_LEVELS = ("high", "medium", "low")


class TableError(Exception):
    """Raised when table data is malformed or cannot be loaded."""


@dataclass(frozen=True)
class TypeEntry:
    """One target-language mapping for a Python type name."""

    name: str
    confidence: str
    notes: Tuple[str, ...] = ()
    # Composition template for generic use, e.g. "{0}[]" or "Record<{0}, {1}>"
    template: Optional[str] = None
    imports: Tuple[str, ...] = ()
    alternatives: Tuple[str, ...] = ()


DEFAULT_TABLES_DATA = {
    "builtins": {
        # Primitives
        "int": {"name": "number", "confidence": "high"},
        "float": {"name": "number", "confidence": "high"},
        "complex": {
            "name": "{ re: number; im: number }",
            "confidence": "low",
            "notes": ["No complex number type in TypeScript", "Consider mathjs Complex"],
        },
        "str": {"name": "string", "confidence": "high"},
        "bool": {"name": "boolean", "confidence": "high"},
        "bytes": {
            "name": "Uint8Array",
            "confidence": "medium",
            "notes": ["Consider Buffer for Node.js environments"],
            "alternatives": ["Buffer"],
        },
        "bytearray": {"name": "Uint8Array", "confidence": "medium"},
        "None": {
            "name": "null",
            "confidence": "high",
            "notes": ["Consider undefined vs null semantics"],
        },
        "...": {"name": "...", "confidence": "medium"},

        # Built-in generics
        "list": {"name": "Array", "confidence": "high", "template": "{0}[]"},
        "tuple": {
            "name": "readonly",
            "confidence": "high",
            "template": "readonly [{args}]",
            "notes": ["Use readonly tuple types for immutability"],
        },
        "dict": {
            "name": "Record",
            "confidence": "medium",
            "template": "Record<{0}, {1}>",
            "notes": ["Consider Map for dynamic keys"],
            "alternatives": ["Map"],
        },
        "set": {"name": "Set", "confidence": "high", "template": "Set<{0}>"},
        "frozenset": {"name": "ReadonlySet", "confidence": "high", "template": "ReadonlySet<{0}>"},
        "type": {
            "name": "Function",
            "confidence": "medium",
            "template": "new (...args: unknown[]) => {0}",
            "notes": ["Class objects become constructor types"],
        },

        # Legacy typing aliases, usually imported bare
        "List": {"name": "Array", "confidence": "high", "template": "{0}[]"},
        "Dict": {"name": "Record", "confidence": "medium", "template": "Record<{0}, {1}>"},
        "Tuple": {"name": "readonly", "confidence": "high", "template": "readonly [{args}]"},
        "Set": {"name": "Set", "confidence": "high", "template": "Set<{0}>"},
        "FrozenSet": {"name": "ReadonlySet", "confidence": "high", "template": "ReadonlySet<{0}>"},
        "Type": {
            "name": "Function",
            "confidence": "medium",
            "template": "new (...args: unknown[]) => {0}",
        },
        "Sequence": {"name": "ReadonlyArray", "confidence": "high", "template": "readonly {0}[]"},
        "Iterable": {"name": "Iterable", "confidence": "high", "template": "Iterable<{0}>"},
        "Iterator": {"name": "Iterator", "confidence": "high", "template": "Iterator<{0}>"},
        "Mapping": {
            "name": "Readonly",
            "confidence": "medium",
            "template": "Readonly<Record<{0}, {1}>>",
        },
        "Awaitable": {"name": "Promise", "confidence": "high", "template": "Promise<{0}>"},

        # Functions
        "Callable": {
            "name": "Function",
            "confidence": "medium",
            "notes": ["Define specific function signatures when possible"],
            "alternatives": ["(...args: any[]) => any"],
        },

        # Escape hatches
        "Any": {
            "name": "any",
            "confidence": "low",
            "notes": ["Avoid any; use unknown or specific types"],
        },
        "object": {
            "name": "unknown",
            "confidence": "medium",
            "notes": ["Use unknown instead of any for type safety"],
        },
    },
    "libraries": {
        "datetime": {
            "datetime": {
                "name": "Date",
                "confidence": "high",
                "notes": ["JavaScript Date has different behavior than Python datetime"],
            },
            "date": {
                "name": "Date",
                "confidence": "medium",
                "notes": ["JavaScript has no date-only type; normalize the time part"],
            },
            "timedelta": {
                "name": "number",
                "confidence": "medium",
                "notes": ["Represent as milliseconds", "Consider using date-fns or day.js"],
            },
        },
        "pathlib": {
            "Path": {
                "name": "string",
                "confidence": "medium",
                "notes": ["Use string paths with the Node.js path module"],
                "alternatives": ["URL"],
            },
        },
        "uuid": {
            "UUID": {
                "name": "string",
                "confidence": "high",
                "notes": ["Use string representation", "Consider uuid library for generation"],
            },
        },
        "decimal": {
            "Decimal": {
                "name": "number",
                "confidence": "low",
                "notes": ["JavaScript number precision issues", "Consider decimal.js library"],
                "imports": ["decimal.js"],
                "alternatives": ["Decimal"],
            },
        },
        "dataclasses": {
            "dataclass": {
                "name": "interface",
                "confidence": "high",
                "notes": ["Convert to TypeScript interface or class"],
            },
        },
        "enum": {
            "Enum": {
                "name": "enum",
                "confidence": "high",
                "notes": ["Prefer string literal unions over TypeScript enums"],
            },
        },
        "collections": {
            "OrderedDict": {
                "name": "Map",
                "confidence": "high",
                "template": "Map<{0}, {1}>",
                "notes": ["Map preserves insertion order"],
            },
            "defaultdict": {
                "name": "Map",
                "confidence": "medium",
                "template": "Map<{0}, {1}>",
                "notes": ["Default values must be supplied at each read"],
            },
            "deque": {
                "name": "Array",
                "confidence": "medium",
                "template": "{0}[]",
                "notes": ["Array.shift() is O(n); use a ring buffer for hot paths"],
            },
            "Counter": {
                "name": "Map<string, number>",
                "confidence": "medium",
                "template": "Map<{0}, number>",
            },
        },
        "typing": {
            "TypeVar": {
                "name": "generic",
                "confidence": "medium",
                "notes": ["Convert to TypeScript generic parameter"],
            },
            "Protocol": {
                "name": "interface",
                "confidence": "high",
                "notes": ["Convert to TypeScript interface"],
            },
            "Literal": {
                "name": "literal",
                "confidence": "high",
                "notes": ["Use TypeScript literal types"],
            },
        },
    },
}


def _entry_from_dict(key: str, raw) -> TypeEntry:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise TableError(f"Entry '{key}' must be an object with a non-empty 'name'")

    confidence = raw.get("confidence", "medium")
    if confidence not in CONFIDENCE_LEVELS:
        raise TableError(
            f"Entry '{key}' has invalid confidence '{confidence}' "
            f"(expected one of {', '.join(CONFIDENCE_LEVELS)})"
        )

    return TypeEntry(
        name=raw["name"],
        confidence=confidence,
        notes=tuple(raw.get("notes", ())),
        template=raw.get("template"),
        imports=tuple(raw.get("imports", ())),
        alternatives=tuple(raw.get("alternatives", ())),
    )


class TypeTables:
    """Read-only built-in and library lookup tables."""

    def __init__(self, builtins: Mapping[str, TypeEntry],
                 libraries: Mapping[str, Mapping[str, TypeEntry]]):
        self._builtins = MappingProxyType(dict(builtins))
        self._libraries = MappingProxyType({
            module: MappingProxyType(dict(entries))
            for module, entries in libraries.items()
        })

    @classmethod
    def from_dict(cls, data: dict) -> "TypeTables":
        """Build tables from the ``{"builtins": ..., "libraries": ...}`` shape."""
        if not isinstance(data, dict):
            raise TableError("Table data must be a JSON object")

        builtins = {
            name: _entry_from_dict(name, raw)
            for name, raw in data.get("builtins", {}).items()
        }
        libraries = {}
        for module, entries in data.get("libraries", {}).items():
            if not isinstance(entries, dict):
                raise TableError(f"Library '{module}' must map type names to entries")
            libraries[module] = {
                name: _entry_from_dict(f"{module}.{name}", raw)
                for name, raw in entries.items()
            }
        return cls(builtins, libraries)

    @classmethod
    def from_json(cls, path: str) -> "TypeTables":
        """Load tables from a JSON file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise TableError(f"Could not load type tables from {path}: {e}") from e
        return cls.from_dict(data)

    def lookup(self, name: str) -> Optional[TypeEntry]:
        return self._builtins.get(name)

    def lookup_qualified(self, module: str, name: str) -> Optional[TypeEntry]:
        entries = self._libraries.get(module)
        if entries is None:
            return None
        return entries.get(name)

    def has_module(self, module: str) -> bool:
        return module in self._libraries

    @property
    def builtin_names(self) -> Tuple[str, ...]:
        return tuple(self._builtins)

    @property
    def modules(self) -> Tuple[str, ...]:
        return tuple(self._libraries)

    def library_names(self, module: str) -> Tuple[str, ...]:
        return tuple(self._libraries.get(module, ()))


DEFAULT_TABLES = TypeTables.from_dict(DEFAULT_TABLES_DATA)
