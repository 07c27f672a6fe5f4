"""
Python-to-TypeScript porting MCP server.

Tools:
    type_analysis        - Map a Python type annotation to TypeScript and rate the migration
    library_mapping      - Find TypeScript equivalents for a Python library
    pattern_mapping      - Convert a Python idiom to its TypeScript equivalent
    validation_strategy  - Describe how to validate a conversion
    check_python_syntax  - Check that a Python snippet parses before porting it
    analyze_python_ast   - Find constructs that need migration attention, with complexity

Configuration via environment variables (or a .env file):
    PY2TS_LOG_LEVEL               Logging level (default: INFO)
    PY2TS_TYPE_TABLES             JSON file replacing the built-in type tables
    PY2TS_UNION_BRANCH_THRESHOLD  Union size above which a type is "moderate" (default: 3)
    PY2TS_MAX_TYPE_LENGTH         Longest accepted type expression (default: 2000)

Install in Claude Desktop's claude_desktop_config.json:
{
    "mcpServers": {
        "py2ts": {
            "command": "py2ts-server"
        }
    }
}
"""

import asyncio
import ast
import json
import logging
import os
import sys
import time
import traceback
from typing import Optional

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)

from porting_catalog import (
    LIBRARY_MAPPINGS,
    CatalogError,
    find_library_mapping,
    find_pattern,
    get_validation_strategy,
)
from source_analysis import SourceAnalysisError, analyze_source
from type_analysis import (
    MAX_NESTING_DEPTH,
    PLACEHOLDER_TYPES,
    UNION_BRANCH_THRESHOLD,
    TypeAnalyzer,
    analyze_type,
)
from type_tables import DEFAULT_TABLES, TypeTables

load_dotenv()

# stdout carries the MCP stream; log to stderr only
logging.basicConfig(
    level=getattr(logging, os.getenv("PY2TS_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


# =============================================================================
# Safety & Limits Configuration
# =============================================================================
LIMITS = {
    "max_type_expression_length": _env_int("PY2TS_MAX_TYPE_LENGTH", 2_000),
    "max_nesting_depth": MAX_NESTING_DEPTH,
    "max_code_length": 1_000_000,
}

THRESHOLDS = {
    "union_branch_threshold": _env_int("PY2TS_UNION_BRANCH_THRESHOLD", UNION_BRANCH_THRESHOLD),
}

server = Server(
    "py2ts-porting",
    instructions=(
        "Tools and references for porting Python code to TypeScript. "
        "Use type_analysis for annotations, library_mapping for dependencies, "
        "pattern_mapping for idioms, analyze_python_ast to find hard-to-port constructs "
        "and validation_strategy to plan verification."
    ),
)

_analyzer: Optional[TypeAnalyzer] = None


def load_tables() -> TypeTables:
    """Load the type tables named by PY2TS_TYPE_TABLES, or the built-in ones."""
    path = os.getenv("PY2TS_TYPE_TABLES")
    if not path:
        return DEFAULT_TABLES
    logger.info("Loading type tables from %s", path)
    return TypeTables.from_json(path)


def get_analyzer() -> TypeAnalyzer:
    """Get or build the shared analyzer. It holds no per-request state."""
    global _analyzer
    if _analyzer is None:
        _analyzer = TypeAnalyzer(
            tables=load_tables(),
            union_branch_threshold=THRESHOLDS["union_branch_threshold"],
            max_length=LIMITS["max_type_expression_length"],
            max_depth=LIMITS["max_nesting_depth"],
        )
    return _analyzer


# =============================================================================
# Common Response Schema
# =============================================================================
def create_response(
    tool_name: str,
    status: str,
    data: dict = None,
    error: dict = None,
    metadata: dict = None
) -> str:
    """
    Create a standardized JSON response for catalog tools.

    Args:
        tool_name: Name of the tool that was called
        status: "success" or "error"
        data: The actual result data (for success responses)
        error: Error details (for error responses)
        metadata: Additional debugging metadata

    Returns:
        JSON-formatted response string
    """
    response = {
        "tool": tool_name,
        "status": status,
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }

    if data is not None:
        response["data"] = data

    if error is not None:
        response["error"] = error

    if metadata is not None:
        response["metadata"] = metadata

    return json.dumps(response, indent=2, default=str)


def error_response(tool_name: str, exception: Exception, context: str = None) -> str:
    """Create a standardized error response with full debugging info."""
    tb_lines = traceback.format_exception(type(exception), exception, exception.__traceback__)
    tb_snippet = ''.join(tb_lines[-3:]) if len(tb_lines) > 3 else ''.join(tb_lines)

    error_detail = {
        "type": type(exception).__name__,
        "message": str(exception),
        "traceback_snippet": tb_snippet.strip(),
    }

    if context:
        error_detail["context"] = context

    return create_response(
        tool_name=tool_name,
        status="error",
        error=error_detail,
        metadata={"limits": LIMITS}
    )


def check_code_input(code, tool_name: str) -> Optional[str]:
    """
    Check that code input is a string within the length limit.

    Returns:
        Error response string if the input is rejected, None otherwise
    """
    if not isinstance(code, str):
        return create_response(
            tool_name=tool_name,
            status="error",
            error={
                "type": "InvalidArgument",
                "message": f"code is required and must be a string, got {type(code).__name__}",
            }
        )

    if len(code) > LIMITS["max_code_length"]:
        return create_response(
            tool_name=tool_name,
            status="error",
            error={
                "type": "CodeLengthLimitExceeded",
                "message": f"Code length ({len(code):,} chars) exceeds limit ({LIMITS['max_code_length']:,} chars)",
                "length": len(code),
                "limit": LIMITS["max_code_length"],
            }
        )
    return None


def _catalog_response(tool_name: str, lookup, value) -> str:
    try:
        data = lookup(value)
    except CatalogError as e:
        return create_response(
            tool_name=tool_name,
            status="error",
            error={"type": "InvalidArgument", "message": str(e)},
        )
    return create_response(tool_name=tool_name, status="success", data=data)


@server.list_tools()
async def list_tools():
    return [
        Tool(
            name="type_analysis",
            description="Analyze a Python type annotation and map it to TypeScript. Returns the parsed type, the TypeScript mapping with confidence, conversion notes, runtime considerations, a testing approach and a migration complexity rating.",
            inputSchema={
                "type": "object",
                "properties": {
                    "typeExpression": {
                        "type": "string",
                        "description": "Python type annotation (e.g., 'list[str]', 'dict[str, int]', 'Optional[datetime.datetime]', 'str | None')"
                    },
                    "context": {
                        "type": "string",
                        "description": "Additional context about where the type is used"
                    }
                },
                "required": ["typeExpression"]
            }
        ),
        Tool(
            name="library_mapping",
            description="Find TypeScript/JavaScript equivalents for a Python library with install commands and API differences",
            inputSchema={
                "type": "object",
                "properties": {
                    "pythonLibrary": {
                        "type": "string",
                        "description": "Name of the Python library (e.g., 'requests', 'flask')"
                    }
                },
                "required": ["pythonLibrary"]
            }
        ),
        Tool(
            name="pattern_mapping",
            description="Convert a Python idiom to its TypeScript equivalent with examples and caveats",
            inputSchema={
                "type": "object",
                "properties": {
                    "pattern": {
                        "type": "string",
                        "description": "Pattern to look up (e.g., 'list comprehension', 'context manager', 'union', 'dict merge')"
                    }
                },
                "required": ["pattern"]
            }
        ),
        Tool(
            name="validation_strategy",
            description="Get a strategy for validating a Python-to-TypeScript conversion",
            inputSchema={
                "type": "object",
                "properties": {
                    "validationType": {
                        "type": "string",
                        "enum": ["type-safety", "behavioral", "performance"],
                        "description": "Kind of validation to plan"
                    }
                },
                "required": ["validationType"]
            }
        ),
        Tool(
            name="check_python_syntax",
            description="Check that Python source parses before porting it",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {
                        "type": "string",
                        "description": "Python code to check"
                    }
                },
                "required": ["code"]
            }
        ),
        Tool(
            name="analyze_python_ast",
            description="Analyze Python source to find constructs that need special migration attention (metaclasses, decorators, context managers, generators, dynamic execution...) with severity, guidance and cyclomatic complexity",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {
                        "type": "string",
                        "description": "Python code to analyze"
                    },
                    "analysisLevel": {
                        "type": "string",
                        "enum": ["basic", "detailed", "comprehensive"],
                        "description": "basic lists only high and critical findings (default: detailed)"
                    },
                    "includeComplexity": {
                        "type": "boolean",
                        "description": "Include cyclomatic complexity (default: true)"
                    }
                },
                "required": ["code"]
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict):
    arguments = arguments or {}

    if name == "type_analysis":
        try:
            result = analyze_type(arguments, get_analyzer())
        except Exception as e:
            logger.exception("Error handling tool '%s'", name)
            return [TextContent(type="text", text=error_response(name, e, "analyzing type expression"))]
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    elif name == "library_mapping":
        text = _catalog_response(name, find_library_mapping, arguments.get("pythonLibrary"))
        return [TextContent(type="text", text=text)]

    elif name == "pattern_mapping":
        text = _catalog_response(name, find_pattern, arguments.get("pattern"))
        return [TextContent(type="text", text=text)]

    elif name == "validation_strategy":
        text = _catalog_response(name, get_validation_strategy, arguments.get("validationType"))
        return [TextContent(type="text", text=text)]

    elif name == "check_python_syntax":
        code = arguments.get("code")

        input_error = check_code_input(code, name)
        if input_error:
            return [TextContent(type="text", text=input_error)]

        try:
            ast.parse(code)
            data = {"valid": True}
        except SyntaxError as e:
            data = {
                "valid": False,
                "line": e.lineno,
                "message": e.msg,
                "text": e.text.strip() if e.text else "",
            }
        return [TextContent(type="text", text=create_response(name, "success", data=data))]

    elif name == "analyze_python_ast":
        code = arguments.get("code")

        input_error = check_code_input(code, name)
        if input_error:
            return [TextContent(type="text", text=input_error)]

        try:
            data = analyze_source(
                code,
                analysis_level=arguments.get("analysisLevel") or "detailed",
                include_complexity=arguments.get("includeComplexity", True),
            )
        except SyntaxError as e:
            return [TextContent(type="text", text=create_response(
                tool_name=name,
                status="error",
                error={"type": "SyntaxError", "message": e.msg, "line": e.lineno, "offset": e.offset},
            ))]
        except SourceAnalysisError as e:
            return [TextContent(type="text", text=create_response(
                tool_name=name,
                status="error",
                error={"type": "InvalidArgument", "message": str(e)},
            ))]
        return [TextContent(type="text", text=create_response(name, "success", data=data))]

    logger.warning("Unknown tool requested: %s", name)
    return [TextContent(type="text", text=f"Unknown tool: {name}")]


# =============================================================================
# Resources
# =============================================================================
METHODOLOGY_GUIDE = """# Python-to-TypeScript Porting Methodology

## Phase 1: Assessment and Planning
1. **Inventory components**: files, classes, functions, external dependencies
2. **Complexity assessment**: dynamic typing, metaprogramming, performance-critical code
3. **Risk analysis**: third-party libraries, C extensions, integration points

### Strategy Selection
| Approach | Best for | Risk |
|----------|----------|------|
| Big bang | < 10k lines | High |
| Incremental | 10k-100k lines | Medium |
| Hybrid (keep Python services behind an API) | > 100k lines | Low |

## Phase 2: Environment Setup
- `tsc --init` with `"strict": true`
- Jest or Vitest, plus fast-check for property tests
- ESLint with TypeScript rules

## Phase 3: Core Migration
Port in dependency order:
1. Utilities and constants
2. Data models (dataclasses become interfaces)
3. Business logic
4. Integration layer
5. Application layer

## Phase 4: Validation
- Unit tests per component
- Property tests for behavioral equivalence
- Performance benchmarks on hot paths

## Phase 5: Rollout
Run both implementations side by side, shift traffic gradually, compare error
rates, then retire the Python version.
"""


def render_type_quickref(tables: TypeTables) -> str:
    """Markdown table of the built-in type mappings."""
    lines = [
        "# Python to TypeScript Type Quick Reference",
        "",
        "| Python | TypeScript | Confidence |",
        "|--------|------------|------------|",
    ]
    for name in tables.builtin_names:
        if name in PLACEHOLDER_TYPES:
            continue
        entry = tables.lookup(name)
        lines.append(f"| `{name}` | `{entry.name}` | {entry.confidence} |")

    lines += ["", "## Library Types", ""]
    for module in tables.modules:
        for name in tables.library_names(module):
            entry = tables.lookup_qualified(module, name)
            lines.append(f"- `{module}.{name}` → `{entry.name}` ({entry.confidence})")

    lines += [
        "",
        "## Syntax",
        "",
        "- `Optional[T]` and `T | None` → `T | undefined`",
        "- `Union[A, B]` and `A | B` → `A | B`",
        "- `list[T]` → `T[]`, `dict[K, V]` → `Record<K, V>`, `tuple[A, B]` → `readonly [A, B]`",
    ]
    return "\n".join(lines) + "\n"


def render_library_database() -> str:
    lines = ["# Python to TypeScript Library Mapping Database", ""]
    for key, mapping in sorted(LIBRARY_MAPPINGS.items()):
        equivalents = ", ".join(e["name"] for e in mapping["typeScriptEquivalents"])
        lines.append(f"- **{key}** → {equivalents} ({mapping['migrationComplexity']})")
    return "\n".join(lines) + "\n"


RESOURCES = {
    "guide://py2ts/methodology": (
        "Porting Methodology",
        "Phase-by-phase approach for Python-to-TypeScript migrations",
    ),
    "guide://py2ts/type-quickref": (
        "Type Quick Reference",
        "Python type annotations and their TypeScript equivalents",
    ),
    "db://py2ts/libraries": (
        "Library Database",
        "Python libraries and their TypeScript equivalents",
    ),
}


@server.list_resources()
async def list_resources():
    return [
        Resource(uri=uri, name=name, description=description, mimeType="text/markdown")
        for uri, (name, description) in RESOURCES.items()
    ]


@server.read_resource()
async def read_resource(uri):
    key = str(uri).rstrip("/")
    if key == "guide://py2ts/methodology":
        content = METHODOLOGY_GUIDE
    elif key == "guide://py2ts/type-quickref":
        content = render_type_quickref(get_analyzer().tables)
    elif key == "db://py2ts/libraries":
        content = render_library_database()
    else:
        logger.warning("Unknown resource requested: %s", key)
        return [ReadResourceContents(content="Resource not found", mime_type="text/plain")]
    return [ReadResourceContents(content=content, mime_type="text/markdown")]


# =============================================================================
# Prompts
# =============================================================================
ANALYSIS_FOCUS = {
    "types": """Analyze the following Python code and identify all type-related challenges for porting to TypeScript:

{code}

Please provide:
1. Type annotations present or missing
2. Dynamic typing patterns that need TypeScript equivalents
3. Union types and optional values to handle
4. Generic types and their TypeScript mappings
5. Recommended TypeScript type definitions""",

    "libraries": """Analyze the following Python code for library dependencies and suggest TypeScript equivalents:

{code}

Please provide:
1. All imported libraries and their purposes
2. TypeScript/JavaScript equivalents for each library
3. Migration complexity for each dependency
4. Alternative approaches if no direct equivalent exists
5. Installation commands for recommended packages""",

    "patterns": """Analyze the following Python code for language patterns and idioms that need conversion:

{code}

Please provide:
1. Python-specific patterns used (list comprehensions, context managers, etc.)
2. TypeScript equivalents for each pattern
3. Code examples showing the conversion
4. Performance and readability considerations
5. Best practices for the TypeScript implementation""",

    "overall": """Provide a comprehensive analysis of this Python code for porting to TypeScript:

{code}

Please analyze:
1. Overall complexity assessment (simple/moderate/complex/critical)
2. Type system challenges and recommendations
3. Library dependencies and TypeScript alternatives
4. Language pattern conversions needed
5. Recommended porting approach and timeline
6. Potential risks and mitigation strategies
7. Testing strategy for validation""",
}

REVIEW_TEMPLATE = """Review this Python to TypeScript conversion with focus on {focus}:

## Original Python Code:
```python
{python}
```

## Converted TypeScript Code:
```typescript
{typescript}
```

Please provide:
1. Correctness assessment - does the TypeScript version maintain the same behavior?
2. Type safety evaluation - are the types appropriate and safe?
3. Code quality review - style, readability, and maintainability
4. Performance considerations - any potential performance impacts
5. Recommended improvements or corrections
6. Missing error handling or edge cases
7. Overall conversion quality rating (1-10) with justification"""


@server.list_prompts()
async def list_prompts():
    return [
        Prompt(
            name="analyze-python-file",
            description="Analyze a Python file for porting complexity and recommendations",
            arguments=[
                PromptArgument(name="pythonCode", description="The Python code to analyze", required=True),
                PromptArgument(
                    name="focusArea",
                    description="One of: types, libraries, patterns, overall (default: overall)",
                    required=False,
                ),
            ],
        ),
        Prompt(
            name="review-typescript-conversion",
            description="Review a TypeScript conversion of Python code",
            arguments=[
                PromptArgument(name="originalPython", description="Original Python code", required=True),
                PromptArgument(name="convertedTypeScript", description="Converted TypeScript code", required=True),
                PromptArgument(
                    name="reviewFocus",
                    description="One of: correctness, types, performance, style (default: correctness)",
                    required=False,
                ),
            ],
        ),
    ]


def _required(arguments: dict, key: str) -> str:
    value = arguments.get(key)
    if not value:
        raise ValueError(f"Missing required argument: {key}")
    return value


@server.get_prompt()
async def get_prompt(name: str, arguments: dict = None) -> GetPromptResult:
    arguments = arguments or {}

    if name == "analyze-python-file":
        code = _required(arguments, "pythonCode")
        focus = arguments.get("focusArea") or "overall"
        template = ANALYSIS_FOCUS.get(focus, ANALYSIS_FOCUS["overall"])
        text = template.format(code=code)
        description = f"Porting analysis ({focus})"

    elif name == "review-typescript-conversion":
        focus = arguments.get("reviewFocus") or "correctness"
        text = REVIEW_TEMPLATE.format(
            focus=focus,
            python=_required(arguments, "originalPython"),
            typescript=_required(arguments, "convertedTypeScript"),
        )
        description = f"Conversion review ({focus})"

    else:
        raise ValueError(f"Unknown prompt: {name}")

    return GetPromptResult(
        description=description,
        messages=[PromptMessage(role="user", content=TextContent(type="text", text=text))],
    )


async def main():
    logger.info("Starting py2ts porting server on stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
