"""AST scan of Python source for constructs that need migration attention.

Each finding carries a severity (low, medium, high, critical) and a short
guidance string. Cyclomatic complexity is counted per function.
"""

import ast
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

ANALYSIS_LEVELS = ("basic", "detailed", "comprehensive")

# Decorators with a direct TypeScript counterpart
BUILTIN_DECORATORS = frozenset({"property", "staticmethod", "classmethod"})

DYNAMIC_EXECUTION = frozenset({"eval", "exec", "compile"})
DYNAMIC_ATTRIBUTES = frozenset({"getattr", "setattr", "hasattr", "delattr"})

_BRANCH_NODES = (ast.If, ast.IfExp, ast.While, ast.For, ast.AsyncFor,
                 ast.ExceptHandler, ast.Assert, ast.comprehension)
_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)

# (construct types, note) pairs; a note is emitted when any type is present
MIGRATION_NOTES = (
    (("metaclass", "dynamic_class_creation"),
     "Metaclasses detected: consider refactoring to factory patterns or decorators"),
    (("multiple_inheritance",),
     "Multiple inheritance used: TypeScript supports only single inheritance, use mixins or composition"),
    (("context_manager", "async_context_manager"),
     "Context managers found: implement try/finally blocks or resource management patterns"),
    (("dynamic_execution",),
     "Dynamic code execution detected: major refactoring required for type safety"),
    (("generator", "generator_expression"),
     "Generators used: TypeScript supports generators with function* syntax"),
)


class SourceAnalysisError(Exception):
    """Raised when source cannot be analyzed."""


def _decorator_name(decorator: ast.expr) -> str:
    if isinstance(decorator, ast.Call):
        decorator = decorator.func
    if isinstance(decorator, ast.Name):
        return decorator.id
    if isinstance(decorator, ast.Attribute):
        return decorator.attr
    return ast.unparse(decorator)


def cyclomatic_complexity(function: ast.AST) -> int:
    """McCabe complexity of one function body, excluding nested functions."""
    complexity = 1
    pending = list(ast.iter_child_nodes(function))
    while pending:
        node = pending.pop()
        if isinstance(node, _FUNCTION_NODES):
            continue
        if isinstance(node, _BRANCH_NODES):
            complexity += 1
        elif isinstance(node, ast.BoolOp):
            complexity += len(node.values) - 1
        elif isinstance(node, ast.match_case):
            complexity += 1
        pending.extend(ast.iter_child_nodes(node))
    return complexity


class ConstructVisitor(ast.NodeVisitor):
    """Collects porting-relevant constructs and per-function complexity."""

    def __init__(self):
        self.constructs: List[dict] = []
        self.functions: Dict[str, int] = {}
        self._scope: List[str] = []

    def _add(self, kind: str, node: ast.AST, severity: str, guidance: str,
             name: Optional[str] = None, **details):
        construct = {
            "type": kind,
            "line": node.lineno,
            "column": node.col_offset,
            "severity": severity,
            "guidance": guidance,
        }
        if name:
            construct["name"] = name
        if details:
            construct["details"] = details
        self.constructs.append(construct)

    def _visit_scope(self, node):
        self._scope.append(node.name)
        self.generic_visit(node)
        self._scope.pop()

    def visit_ClassDef(self, node):
        for keyword in node.keywords:
            if keyword.arg == "metaclass":
                self._add("metaclass", node, "critical", "Refactor to factory/decorator pattern",
                          node.name, metaclass=ast.unparse(keyword.value))

        if len(node.bases) > 1:
            self._add("multiple_inheritance", node, "high", "Use mixins or composition in TypeScript",
                      node.name, bases=[ast.unparse(base) for base in node.bases])

        for decorator in node.decorator_list:
            self._add("class_decorator", decorator, "medium", "Convert to TypeScript decorator syntax",
                      node.name, decorator=ast.unparse(decorator))

        self._visit_scope(node)

    def visit_FunctionDef(self, node):
        for decorator in node.decorator_list:
            name = _decorator_name(decorator)
            severity = "low" if name in BUILTIN_DECORATORS else "medium"
            self._add("function_decorator", decorator, severity,
                      "Convert to TypeScript decorator or pattern", node.name, decorator=name)

        qualified = ".".join(self._scope + [node.name])
        self.functions[qualified] = cyclomatic_complexity(node)
        self._visit_scope(node)

    def visit_AsyncFunctionDef(self, node):
        self._add("async_function", node, "low", "Use async/await in TypeScript", node.name)
        self.visit_FunctionDef(node)

    def visit_With(self, node):
        self._add("context_manager", node, "high", "Use try/finally or callback pattern",
                  items=len(node.items))
        self.generic_visit(node)

    def visit_AsyncWith(self, node):
        self._add("async_context_manager", node, "high", "Use async try/finally pattern",
                  items=len(node.items))
        self.generic_visit(node)

    def visit_ListComp(self, node):
        self._add("list_comprehension", node, "low", "Use Array methods (map/filter/reduce)")
        self.generic_visit(node)

    def visit_SetComp(self, node):
        self._add("set_comprehension", node, "low", "Build a Set from Array methods")
        self.generic_visit(node)

    def visit_DictComp(self, node):
        self._add("dict_comprehension", node, "low", "Use Object.fromEntries with map")
        self.generic_visit(node)

    def visit_GeneratorExp(self, node):
        self._add("generator_expression", node, "medium", "Use generator functions or iterators")
        self.generic_visit(node)

    def visit_Yield(self, node):
        self._add("generator", node, "low", "Use function* syntax in TypeScript")
        self.generic_visit(node)

    def visit_YieldFrom(self, node):
        self._add("generator", node, "low", "Use yield* in a function* generator")
        self.generic_visit(node)

    def visit_ImportFrom(self, node):
        if any(alias.name == "*" for alias in node.names):
            self._add("star_import", node, "medium", "Use explicit imports in TypeScript",
                      module=node.module)
        self.generic_visit(node)

    def visit_Call(self, node):
        if isinstance(node.func, ast.Name):
            func = node.func.id
            if func in DYNAMIC_EXECUTION:
                self._add("dynamic_execution", node, "critical",
                          "Refactor to avoid dynamic code execution", function=func)
            elif func in DYNAMIC_ATTRIBUTES:
                self._add("dynamic_attribute", node, "medium",
                          "Use bracket notation or type guards", function=func)
            elif func == "type" and len(node.args) == 3:
                self._add("dynamic_class_creation", node, "critical", "Use class factory pattern")
        self.generic_visit(node)

    def visit_Global(self, node):
        self._add("global_statement", node, "medium",
                  "Use module-level exports or class properties", names=list(node.names))
        self.generic_visit(node)

    def visit_Nonlocal(self, node):
        self._add("nonlocal_statement", node, "medium",
                  "Use closure or class properties", names=list(node.names))
        self.generic_visit(node)


def migration_notes(constructs: List[dict]) -> List[str]:
    present = {c["type"] for c in constructs}
    notes = [note for kinds, note in MIGRATION_NOTES if present.intersection(kinds)]

    by_severity = _count(constructs, "severity")
    if by_severity.get("critical"):
        notes.append(f"{by_severity['critical']} critical issues require architectural changes")
    if by_severity.get("high"):
        notes.append(f"{by_severity['high']} high-severity patterns need careful migration")
    return notes


def _count(constructs: List[dict], key: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for construct in constructs:
        counts[construct[key]] = counts.get(construct[key], 0) + 1
    return counts


def analyze_source(code: str, analysis_level: str = "detailed",
                   include_complexity: bool = True) -> dict:
    """
    Scan Python source for constructs that complicate a TypeScript port.

    Args:
        code: Python source
        analysis_level: "basic" keeps only high and critical findings;
            "detailed" and "comprehensive" keep everything
        include_complexity: Add per-function cyclomatic complexity

    Returns:
        Dict with constructs, summary, migrationNotes and optionally complexity

    Raises:
        SourceAnalysisError: If the level is unknown
        SyntaxError: If the code does not parse
    """
    if analysis_level not in ANALYSIS_LEVELS:
        raise SourceAnalysisError(
            f"Unknown analysis level '{analysis_level}' (expected one of {', '.join(ANALYSIS_LEVELS)})"
        )

    visitor = ConstructVisitor()
    visitor.visit(ast.parse(code))
    constructs = visitor.constructs
    logger.debug("Found %d constructs in %d functions", len(constructs), len(visitor.functions))

    result = {
        "summary": {
            "totalConstructs": len(constructs),
            "bySeverity": _count(constructs, "severity"),
            "byType": _count(constructs, "type"),
        },
        "migrationNotes": migration_notes(constructs),
    }

    if analysis_level == "basic":
        constructs = [c for c in constructs if c["severity"] in ("high", "critical")]
    result["constructs"] = constructs

    if include_complexity:
        result["complexity"] = {
            "cyclomatic": sum(visitor.functions.values()),
            "functions": visitor.functions,
        }
    return result
