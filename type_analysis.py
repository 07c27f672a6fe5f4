"""Python type expression analysis for TypeScript migration.

Pipeline per request:

    raw string -> parse_type_string() -> TypeExpression tree
               -> TypeAnalyzer.map_type()          -> TargetMapping
               -> TypeAnalyzer.assess_complexity() -> MigrationComplexity
               -> note / runtime / testing generators
               -> AnalysisResult.to_dict()

Everything here is pure: the lookup tables are read-only and no state is kept
between calls.
"""

import logging
import re
import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from type_tables import DEFAULT_TABLES, TypeEntry, TypeTables

logger = logging.getLogger(__name__)

# =============================================================================
# Tunables
# =============================================================================
# Unions with more branches than this are classified as "moderate".
UNION_BRANCH_THRESHOLD = 3
MAX_EXPRESSION_LENGTH = 2_000
MAX_NESTING_DEPTH = 32

# Lowercase built-in generics usable without typing imports (Python 3.9+)
MODERN_GENERICS = frozenset({"list", "dict", "tuple", "set", "frozenset"})

# Capitalized typing generics and their modern spelling
LEGACY_GENERICS = {
    "List": "list",
    "Dict": "dict",
    "Tuple": "tuple",
    "Set": "set",
    "FrozenSet": "frozenset",
    "Type": "type",
}

ESCAPE_HATCH_TYPES = frozenset({"Any", "object"})

# Ellipsis and the empty parameter list; never rated on their own inside a generic
PLACEHOLDER_TYPES = frozenset({"...", "[]"})

# Qualifiers under which the built-in table still applies
BUILTIN_MODULES = ("", "typing", "builtins")

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$')

# Advisory note categories
NOTE_UNION_BRANCHES = "Union type - ensure all branches are handled"
NOTE_OPTIONAL_ABSENT = "Optional type - handle undefined case"
NOTE_DICT_KEYS = "Consider using Map for dynamic keys or interface for known keys"
NOTE_DICT_KEY_STRINGS = "Object keys are always strings; non-string dict keys need Map"
NOTE_LIST_ELEMENTS = "Array type - ensure homogeneous elements or use union types"
NOTE_TYPE_GUARDS = "Use discriminated unions with type guards for type safety"
NOTE_MODERN_SYNTAX = "Modern Python 3.9+ syntax aligns directly with TypeScript"
NOTE_LEGACY_PREFIX = "Upgrade legacy typing syntax"


class TypeAnalysisError(Exception):
    """Base exception for type analysis failures."""


class ParseError(TypeAnalysisError):
    """Raised when a type expression is malformed."""


# =============================================================================
# Data model
# =============================================================================
class TypeKind(Enum):
    """Shape of a parsed type expression node."""

    LEAF = "leaf"
    GENERIC = "generic"
    UNION = "union"
    OPTIONAL = "optional"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def weakest(cls, levels) -> "Confidence":
        """Return the least trustworthy level, HIGH for an empty sequence."""
        order = [cls.HIGH, cls.MEDIUM, cls.LOW]
        return max(levels, key=order.index, default=cls.HIGH)


class MigrationComplexity(Enum):
    TRIVIAL = "trivial"
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    REQUIRES_REDESIGN = "requires-redesign"


@dataclass(frozen=True)
class TypeExpression:
    """One node of a parsed Python type annotation.

    ``kind`` is the only shape discriminant. Leaves carry no arguments and
    every other kind carries at least one.
    """

    name: str
    module: str = ""
    kind: TypeKind = TypeKind.LEAF
    args: Tuple["TypeExpression", ...] = ()
    modern_syntax: bool = False

    def __post_init__(self):
        if (self.kind is TypeKind.LEAF) == bool(self.args):
            raise ValueError(
                f"{self.kind.value} node '{self.name}' has {len(self.args)} type arguments"
            )

    @property
    def is_generic(self) -> bool:
        return self.kind is TypeKind.GENERIC

    @property
    def is_union(self) -> bool:
        return self.kind is TypeKind.UNION

    @property
    def is_optional(self) -> bool:
        return self.kind is TypeKind.OPTIONAL

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name

    @property
    def uses_legacy_syntax(self) -> bool:
        if self.is_optional:
            return True
        if self.is_union:
            return not self.modern_syntax
        return self.is_generic and self.name in LEGACY_GENERICS

    def walk(self) -> Iterator["TypeExpression"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for arg in self.args:
            yield from arg.walk()

    def to_source(self) -> str:
        """Re-serialize to a type string that parses back to an equal tree."""
        inner = ", ".join(arg.to_source() for arg in self.args)
        if self.kind is TypeKind.LEAF:
            return self.qualified_name
        if self.kind is TypeKind.GENERIC:
            return f"{self.qualified_name}[{inner}]"
        if self.kind is TypeKind.UNION:
            if self.modern_syntax:
                return " | ".join(arg.to_source() for arg in self.args)
            return f"Union[{inner}]"
        if self.kind is TypeKind.OPTIONAL:
            return f"Optional[{inner}]"
        raise ValueError(f"Unhandled type kind: {self.kind}")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "module": self.module,
            "isGeneric": self.is_generic,
            "isUnion": self.is_union,
            "isOptional": self.is_optional,
            "usesModernSyntax": self.modern_syntax,
            "typeArguments": [arg.to_dict() for arg in self.args],
        }


@dataclass(frozen=True)
class TargetMapping:
    """TypeScript rendering of one TypeExpression node."""

    name: str
    confidence: Confidence
    notes: Tuple[str, ...] = ()
    nested_arguments: Tuple["TargetMapping", ...] = ()
    imports: Tuple[str, ...] = ()
    alternatives: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "confidence": self.confidence.value,
            "notes": list(self.notes),
            "nestedArguments": [arg.to_dict() for arg in self.nested_arguments],
        }
        if self.imports:
            data["imports"] = list(self.imports)
        if self.alternatives:
            data["alternatives"] = list(self.alternatives)
        return data


@dataclass(frozen=True)
class AnalysisResult:
    python_type: TypeExpression
    typescript_mapping: TargetMapping
    conversion_notes: Tuple[str, ...]
    runtime_considerations: Tuple[str, ...]
    testing_approach: Tuple[str, ...]
    migration_complexity: MigrationComplexity

    def to_dict(self) -> dict:
        return {
            "pythonType": self.python_type.to_dict(),
            "typeScriptMapping": self.typescript_mapping.to_dict(),
            "conversionNotes": list(self.conversion_notes),
            "runtimeConsiderations": list(self.runtime_considerations),
            "testingApproach": list(self.testing_approach),
            "migrationComplexity": self.migration_complexity.value,
        }


# =============================================================================
# Parser
# =============================================================================
def _check_brackets(text: str) -> None:
    depth = 0
    for position, char in enumerate(text):
        if char == '[':
            depth += 1
        elif char == ']':
            depth -= 1
            if depth < 0:
                raise ParseError(
                    f"Unbalanced brackets in '{text}': unexpected ']' at position {position}"
                )
    if depth > 0:
        raise ParseError(f"Unbalanced brackets in '{text}': {depth} unclosed '['")


def _split_top_level(text: str, separator: str) -> List[str]:
    """Split on ``separator`` only where it is not nested inside brackets."""
    parts = []
    current = []
    depth = 0
    for char in text:
        if char == '[':
            depth += 1
        elif char == ']':
            depth -= 1
        if char == separator and depth == 0:
            parts.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append(''.join(current).strip())
    return parts


def _split_generic(text: str) -> Optional[Tuple[str, str]]:
    """Split ``head[inner]`` into ``(head, inner)``; None when there is no bracket."""
    start = text.find('[')
    if start == -1:
        return None

    depth = 0
    for position in range(start, len(text)):
        if text[position] == '[':
            depth += 1
        elif text[position] == ']':
            depth -= 1
            if depth == 0:
                if position != len(text) - 1:
                    raise ParseError(
                        f"Unexpected text after ']' in '{text}': '{text[position + 1:]}'"
                    )
                return text[:start].strip(), text[start + 1:position]

    raise ParseError(f"Unbalanced brackets in '{text}'")


def _split_qualified(head: str) -> Tuple[str, str]:
    if '.' in head and _IDENTIFIER.match(head):
        module, name = head.rsplit('.', 1)
        return module, name
    return "", head


def _parse_arguments(inner: str, text: str, depth: int, max_depth: int) -> Tuple[TypeExpression, ...]:
    if not inner.strip():
        raise ParseError(f"Empty argument list in '{text}'")
    parts = _split_top_level(inner, ',')
    if any(not part for part in parts):
        raise ParseError(f"Empty type argument in '{text}'")
    return tuple(_parse(part, depth + 1, max_depth) for part in parts)


def _parse(text: str, depth: int, max_depth: int) -> TypeExpression:
    if depth > max_depth:
        raise ParseError(f"Type expression nests deeper than {max_depth} levels")

    # 1. Top-level pipe union
    alternatives = _split_top_level(text, '|')
    if len(alternatives) > 1:
        if any(not alt for alt in alternatives):
            raise ParseError(f"Empty union alternative in '{text}'")
        return TypeExpression(
            name="Union",
            kind=TypeKind.UNION,
            args=tuple(_parse(alt, depth + 1, max_depth) for alt in alternatives),
            modern_syntax=True,
        )

    if len(_split_top_level(text, ',')) > 1:
        raise ParseError(f"Unexpected ',' outside brackets in '{text}'")

    generic = _split_generic(text)
    if generic is not None:
        head, inner = generic

        # Headless bracket list: Callable parameter list. "[]" is a leaf.
        if not head and not inner.strip():
            return TypeExpression(name="[]")

        args = _parse_arguments(inner, text, depth, max_depth)
        module, name = _split_qualified(head)
        if head and not _IDENTIFIER.match(head):
            raise ParseError(f"Invalid generic type name '{head}' in '{text}'")

        if module in ("", "typing"):
            # 2. Optional[T]
            if name == "Optional":
                if len(args) != 1:
                    raise ParseError(
                        f"Optional[...] takes exactly one argument, got {len(args)} in '{text}'"
                    )
                return TypeExpression(name="Optional", kind=TypeKind.OPTIONAL, args=args)

            # 3. Union[A, B, ...]
            if name == "Union":
                if len(args) == 1:
                    return args[0]
                return TypeExpression(name="Union", kind=TypeKind.UNION, args=args)

        # 4. Generic head
        return TypeExpression(
            name=name,
            module=module,
            kind=TypeKind.GENERIC,
            args=args,
            modern_syntax=not module and name in MODERN_GENERICS,
        )

    # 5./6. Dotted or bare identifier
    module, name = _split_qualified(text)
    return TypeExpression(name=name, module=module)


def parse_type_string(
    text: str,
    max_length: int = MAX_EXPRESSION_LENGTH,
    max_depth: int = MAX_NESTING_DEPTH,
) -> TypeExpression:
    """
    Parse a Python type annotation into a TypeExpression tree.

    Accepts both legacy typing syntax (``Optional[str]``, ``Union[int, str]``,
    ``List[int]``) and modern syntax (``str | None``, ``list[int]``).

    Args:
        text: The type annotation to parse
        max_length: Longest accepted input, in characters
        max_depth: Deepest accepted nesting of brackets and unions

    Returns:
        The root TypeExpression

    Raises:
        ParseError: If the annotation is empty, too long, too deep, or malformed
    """
    if not isinstance(text, str):
        raise ParseError("Type expression must be a string")

    text = text.strip()
    if not text:
        raise ParseError("Type expression is empty")
    if len(text) > max_length:
        raise ParseError(
            f"Type expression length ({len(text):,} chars) exceeds limit ({max_length:,} chars)"
        )

    _check_brackets(text)
    return _parse(text, 0, max_depth)


def modern_spelling(expr: TypeExpression) -> str:
    """Render ``expr`` using Python 3.9+ union and built-in generic syntax."""
    if expr.is_optional:
        return f"{modern_spelling(expr.args[0])} | None"
    if expr.is_union:
        return " | ".join(modern_spelling(arg) for arg in expr.args)
    if expr.is_generic:
        head = LEGACY_GENERICS.get(expr.name, expr.name) if expr.module in ("", "typing") else expr.qualified_name
        return f"{head}[{', '.join(modern_spelling(arg) for arg in expr.args)}]"
    return expr.qualified_name


def _unique(items) -> Tuple[str, ...]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


def _canonical(expr: TypeExpression) -> str:
    if expr.module in ("", "typing"):
        return LEGACY_GENERICS.get(expr.name, expr.name)
    return expr.qualified_name


def _array_element(name: str) -> str:
    if " | " in name or "=>" in name or name.startswith("readonly "):
        return f"({name})"
    return name


# =============================================================================
# Analyzer
# =============================================================================
class TypeAnalyzer:
    """Maps parsed Python types to TypeScript and rates migration effort."""

    def __init__(
        self,
        tables: Optional[TypeTables] = None,
        union_branch_threshold: int = UNION_BRANCH_THRESHOLD,
        max_length: int = MAX_EXPRESSION_LENGTH,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        self.tables = tables if tables is not None else DEFAULT_TABLES
        self.union_branch_threshold = union_branch_threshold
        self.max_length = max_length
        self.max_depth = max_depth

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------
    def map_type(self, expr: TypeExpression) -> TargetMapping:
        nested = tuple(self.map_type(arg) for arg in expr.args)

        entry = self._builtin_entry(expr)
        if entry is not None:
            if expr.is_generic:
                return self._compose_generic(expr, entry, nested)
            return self._from_entry(entry)

        if expr.module:
            entry = self.tables.lookup_qualified(expr.module, expr.name)
            if entry is not None:
                if not expr.is_generic:
                    return self._from_entry(entry)
                if entry.template:
                    return self._compose_generic(expr, entry, nested)
                return TargetMapping(
                    name=entry.name,
                    confidence=Confidence.weakest(self._levels(entry, expr.args, nested)),
                    notes=_unique(entry.notes + self._unmapped_notes(expr.args, nested)),
                    nested_arguments=nested,
                    imports=entry.imports,
                    alternatives=entry.alternatives,
                )

        if expr.is_union:
            return TargetMapping(
                name=" | ".join(mapping.name for mapping in nested),
                confidence=Confidence.weakest(m.confidence for m in nested),
                notes=(NOTE_UNION_BRANCHES,) + self._unmapped_notes(expr.args, nested),
                nested_arguments=nested,
            )

        if expr.is_optional:
            inner = nested[0]
            return TargetMapping(
                name=f"{inner.name} | undefined",
                confidence=inner.confidence,
                notes=inner.notes + (NOTE_OPTIONAL_ABSENT,),
                nested_arguments=nested,
                imports=inner.imports,
            )

        if expr.is_generic and not expr.name:
            return TargetMapping(
                name=f"[{', '.join(m.name for m in nested)}]",
                confidence=Confidence.weakest(m.confidence for m in nested),
                notes=self._unmapped_notes(expr.args, nested),
                nested_arguments=nested,
            )

        return TargetMapping(
            name="unknown",
            confidence=Confidence.LOW,
            notes=(
                f"Unknown Python type: {expr.qualified_name}",
                "Consider creating a custom TypeScript interface",
                "Check if there are equivalent TypeScript libraries",
            ),
            nested_arguments=nested,
        )

    def _builtin_entry(self, expr: TypeExpression) -> Optional[TypeEntry]:
        if expr.kind not in (TypeKind.LEAF, TypeKind.GENERIC):
            return None
        if expr.module not in BUILTIN_MODULES:
            return None
        return self.tables.lookup(expr.name)

    @staticmethod
    def _from_entry(entry: TypeEntry) -> TargetMapping:
        return TargetMapping(
            name=entry.name,
            confidence=Confidence(entry.confidence),
            notes=entry.notes,
            imports=entry.imports,
            alternatives=entry.alternatives,
        )

    @staticmethod
    def _unmapped_notes(args: Sequence[TypeExpression], nested: Sequence[TargetMapping]) -> Tuple[str, ...]:
        return tuple(
            f"Type argument '{arg.to_source()}' has no reliable TypeScript mapping"
            for arg, mapping in zip(args, nested)
            if mapping.confidence is Confidence.LOW and arg.name not in PLACEHOLDER_TYPES
        )

    @staticmethod
    def _levels(entry: TypeEntry, args: Sequence[TypeExpression],
                nested: Sequence[TargetMapping]) -> List[Confidence]:
        return [Confidence(entry.confidence)] + [
            mapping.confidence for arg, mapping in zip(args, nested)
            if arg.name not in PLACEHOLDER_TYPES
        ]

    def _compose_generic(self, expr: TypeExpression, entry: TypeEntry,
                         nested: Tuple[TargetMapping, ...]) -> TargetMapping:
        notes = list(entry.notes) + list(self._unmapped_notes(expr.args, nested))
        levels = self._levels(entry, expr.args, nested)
        names = [mapping.name for mapping in nested]
        canonical = _canonical(expr)

        if canonical == "tuple":
            if len(names) == 2 and expr.args[1].name == "...":
                name = f"readonly {_array_element(names[0])}[]"
            else:
                name = f"readonly [{', '.join(names)}]"
        elif canonical == "Callable":
            name = self._compose_callable(expr, nested, notes, levels)
        elif entry.template:
            needed = _template_arity(entry.template)
            if needed and len(names) != needed:
                notes.append(
                    f"{expr.qualified_name} expects {needed} type argument(s), got {len(names)}"
                )
                levels.append(Confidence.LOW)
                names = (names + ["unknown"] * needed)[:needed]
            if "{0}[]" in entry.template:
                names = [_array_element(names[0])] + names[1:]
            name = entry.template.format(*names, args=", ".join(names))
        else:
            notes.append(f"{expr.qualified_name} is not generic; type arguments are ignored")
            levels.append(Confidence.LOW)
            name = entry.name

        return TargetMapping(
            name=name,
            confidence=Confidence.weakest(levels),
            notes=_unique(notes),
            nested_arguments=nested,
            imports=entry.imports,
            alternatives=entry.alternatives,
        )

    @staticmethod
    def _compose_callable(expr, nested, notes, levels) -> str:
        if len(expr.args) != 2:
            notes.append("Callable expects [parameters, return type]")
            levels.append(Confidence.LOW)
            return "(...args: unknown[]) => unknown"

        params, returns = expr.args
        returns_name = nested[1].name
        if params.name == "...":
            return f"(...args: unknown[]) => {returns_name}"
        if params.name == "[]":
            return f"() => {returns_name}"
        if params.is_generic and not params.name:
            signature = ", ".join(
                f"arg{index}: {mapping.name}"
                for index, mapping in enumerate(nested[0].nested_arguments)
            )
            return f"({signature}) => {returns_name}"

        notes.append("Callable parameters must be a bracketed list or '...'")
        levels.append(Confidence.LOW)
        return f"(...args: unknown[]) => {returns_name}"

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------
    def assess_complexity(self, expr: TypeExpression,
                          mapping: Optional[TargetMapping] = None) -> MigrationComplexity:
        """Rate how much manual rework converting ``expr`` needs. First rule wins."""
        if mapping is None:
            mapping = self.map_type(expr)

        if mapping.confidence is Confidence.LOW:
            return MigrationComplexity.REQUIRES_REDESIGN

        if expr.name in ESCAPE_HATCH_TYPES:
            return MigrationComplexity.COMPLEX

        if expr.module not in BUILTIN_MODULES and not self.tables.has_module(expr.module):
            return MigrationComplexity.COMPLEX

        if expr.is_union and len(expr.args) > self.union_branch_threshold:
            return MigrationComplexity.MODERATE

        if expr.is_generic:
            arg_levels = [
                self.assess_complexity(arg) for arg in expr.args
                if arg.name not in PLACEHOLDER_TYPES
            ]
            for level in (MigrationComplexity.REQUIRES_REDESIGN,
                          MigrationComplexity.COMPLEX,
                          MigrationComplexity.MODERATE):
                if level in arg_levels:
                    return level

        if mapping.confidence is Confidence.MEDIUM:
            return MigrationComplexity.SIMPLE

        return MigrationComplexity.TRIVIAL

    # -------------------------------------------------------------------------
    # Advisory output
    # -------------------------------------------------------------------------
    def conversion_notes(self, expr: TypeExpression, mapping: TargetMapping) -> Tuple[str, ...]:
        notes = list(mapping.notes)
        canonical = _canonical(expr)

        if canonical == "dict":
            notes.append(NOTE_DICT_KEYS)
            notes.append(NOTE_DICT_KEY_STRINGS)

        if canonical == "list" and expr.is_generic:
            notes.append(NOTE_LIST_ELEMENTS)

        if expr.is_union:
            notes.append(NOTE_TYPE_GUARDS)

        nodes = list(expr.walk())
        if any(node.modern_syntax for node in nodes):
            notes.append(NOTE_MODERN_SYNTAX)
        if any(node.uses_legacy_syntax for node in nodes):
            notes.append(
                f"{NOTE_LEGACY_PREFIX}: write '{modern_spelling(expr)}' "
                f"instead of '{expr.to_source()}'"
            )

        if expr.module == "datetime":
            notes.append("JavaScript Date behavior differs from Python datetime")
            notes.append("Consider using date-fns or day.js for better date handling")

        return _unique(notes)

    def runtime_considerations(self, expr: TypeExpression, mapping: TargetMapping) -> Tuple[str, ...]:
        considerations = []
        for node in expr.walk():
            canonical = _canonical(node)
            if canonical in ("int", "float"):
                considerations.append("JavaScript number precision limits (53-bit integers)")
            if canonical == "int":
                considerations.append("Python ints are unbounded; use bigint past Number.MAX_SAFE_INTEGER")
            if canonical == "dict":
                considerations.append("Object iteration order guaranteed in modern JavaScript")
            if canonical == "str":
                considerations.append("Unicode handling differences between Python and JavaScript")
            if canonical in ("bytes", "bytearray"):
                considerations.append("Binary data needs explicit encoding when crossing JSON boundaries")
            if node.is_union:
                considerations.append("Runtime type checking needed for union types")
            if node.is_optional or (canonical == "None" and not node.args):
                considerations.append("Normalize Python None to null or undefined at API boundaries")
            if node.module == "decimal":
                considerations.append("Precision loss with JavaScript numbers")
            if node.module == "datetime":
                considerations.append("Naive and aware datetimes collapse into one JavaScript Date")
        return _unique(considerations)

    def testing_approach(self, expr: TypeExpression, complexity: MigrationComplexity) -> Tuple[str, ...]:
        depth = {
            MigrationComplexity.TRIVIAL: ["Basic unit tests for type conversion"],
            MigrationComplexity.SIMPLE: [
                "Unit tests with edge cases",
                "Property-based testing for validation",
            ],
            MigrationComplexity.MODERATE: [
                "Comprehensive unit tests",
                "Integration tests",
                "Property-based testing",
            ],
            MigrationComplexity.COMPLEX: [
                "Extensive unit and integration tests",
                "Property-based testing",
                "Performance benchmarking",
                "Cross-platform testing",
            ],
            MigrationComplexity.REQUIRES_REDESIGN: [
                "Complete test suite redesign",
                "Behavioral compatibility testing",
                "Performance and correctness validation",
            ],
        }
        approaches = list(depth[complexity])

        nodes = list(expr.walk())
        if any(node.is_union for node in nodes):
            approaches.append("Test all union type branches")
        if any(node.is_optional for node in nodes):
            approaches.append("Test undefined/null handling")

        return tuple(approaches)

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------
    def analyze(self, type_expression: str) -> AnalysisResult:
        expr = parse_type_string(type_expression, self.max_length, self.max_depth)
        mapping = self.map_type(expr)
        complexity = self.assess_complexity(expr, mapping)
        return AnalysisResult(
            python_type=expr,
            typescript_mapping=mapping,
            conversion_notes=self.conversion_notes(expr, mapping),
            runtime_considerations=self.runtime_considerations(expr, mapping),
            testing_approach=self.testing_approach(expr, complexity),
            migration_complexity=complexity,
        )


def _template_arity(template: str) -> int:
    """Number of positional fields in a template; 0 means any number (``{args}``)."""
    indexes = [
        int(field) for _, field, _, _ in string.Formatter().parse(template)
        if field is not None and field.isdigit()
    ]
    return max(indexes, default=-1) + 1


def analyze_type(arguments: dict, analyzer: Optional[TypeAnalyzer] = None) -> dict:
    """
    Run a type analysis request and return the response payload.

    Args:
        arguments: ``{"typeExpression": str, "context": str (optional)}``;
            ``pythonType`` is accepted in place of ``typeExpression``
        analyzer: Analyzer to use (default tables when omitted)

    Returns:
        The analysis as a dict, or ``{"error": ..., "status": "failed"}``
    """
    if analyzer is None:
        analyzer = TypeAnalyzer()

    try:
        if not isinstance(arguments, dict):
            raise TypeAnalysisError("Arguments must be an object")

        text = arguments.get("typeExpression", arguments.get("pythonType"))
        if not isinstance(text, str) or not text.strip():
            raise TypeAnalysisError("typeExpression is required and must be a non-empty string")

        context = arguments.get("context")
        if context is not None and not isinstance(context, str):
            raise TypeAnalysisError("context must be a string")
        if context:
            logger.debug("Analyzing %r (context: %s)", text, context)

        result = analyzer.analyze(text)
    except TypeAnalysisError as e:
        logger.info("Type analysis failed: %s", e)
        return {"error": str(e), "status": "failed"}

    logger.debug("%s", render_analysis(result))
    return result.to_dict()


def render_analysis(result: AnalysisResult) -> str:
    """Plain-text summary of an analysis, for log output."""
    mapping = result.typescript_mapping
    lines = [
        "TYPE ANALYSIS",
        f"  Python type:  {result.python_type.to_source()}",
        f"  TypeScript:   {mapping.name}",
    ]
    if mapping.imports:
        lines[-1] += f" (from {', '.join(mapping.imports)})"
    lines.append(f"  Confidence:   {mapping.confidence.value}")
    lines.append(f"  Complexity:   {result.migration_complexity.value}")

    for title, items in (
        ("Conversion notes", result.conversion_notes),
        ("Runtime considerations", result.runtime_considerations),
        ("Testing approach", result.testing_approach),
    ):
        if items:
            lines.append(f"  {title}:")
            lines.extend(f"    • {item}" for item in items)

    return "\n".join(lines)
