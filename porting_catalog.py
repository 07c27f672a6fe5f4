"""Static knowledge base for Python-to-TypeScript porting.

Library equivalents, idiom/pattern conversions and validation strategies.
Lookups return plain dicts ready to be serialized into a tool response.
"""

import copy


class CatalogError(Exception):
    """Raised when a catalog query is missing or malformed."""


# =============================================================================
# Library mappings
# =============================================================================
LIBRARY_MAPPINGS = {
    # Web frameworks
    "flask": {
        "pythonLibrary": "flask",
        "typeScriptEquivalents": [
            {
                "name": "Express.js",
                "package": "express",
                "confidence": "high",
                "notes": ["Most popular Node.js web framework", "Similar routing concepts"],
                "installCommand": "npm install express @types/express",
                "apiDifferences": ["Different decorator syntax", "Manual route definition"],
            },
            {
                "name": "Fastify",
                "package": "fastify",
                "confidence": "medium",
                "notes": ["High performance", "TypeScript-first"],
                "installCommand": "npm install fastify",
                "apiDifferences": ["Schema-based validation", "Plugin architecture"],
            },
        ],
        "migrationComplexity": "moderate",
        "recommendations": ["Consider Express.js for familiarity", "Fastify for performance and TypeScript"],
    },
    "django": {
        "pythonLibrary": "django",
        "typeScriptEquivalents": [
            {
                "name": "Nest.js",
                "package": "@nestjs/core",
                "confidence": "high",
                "notes": ["Enterprise-grade", "Decorator-based like Django", "Built-in TypeScript"],
                "installCommand": "npm install @nestjs/core @nestjs/common",
                "apiDifferences": ["Different ORM integration", "Module-based architecture"],
            },
        ],
        "migrationComplexity": "complex",
        "recommendations": ["Consider Nest.js for enterprise applications", "Evaluate Next.js for full-stack"],
    },
    "fastapi": {
        "pythonLibrary": "fastapi",
        "typeScriptEquivalents": [
            {
                "name": "Fastify",
                "package": "fastify",
                "confidence": "high",
                "notes": ["JSON-schema validation like pydantic models", "Async by default"],
                "installCommand": "npm install fastify @fastify/type-provider-typebox",
                "apiDifferences": ["Schemas declared separately from handlers", "No dependency injection"],
            },
            {
                "name": "tRPC",
                "package": "@trpc/server",
                "confidence": "medium",
                "notes": ["End-to-end types", "Best with a TypeScript client"],
                "installCommand": "npm install @trpc/server zod",
                "apiDifferences": ["RPC procedures instead of REST routes", "No OpenAPI by default"],
            },
        ],
        "migrationComplexity": "moderate",
        "recommendations": ["Fastify with TypeBox for OpenAPI-style services", "tRPC for TypeScript-only stacks"],
    },

    # Data manipulation
    "pandas": {
        "pythonLibrary": "pandas",
        "typeScriptEquivalents": [
            {
                "name": "Observable Plot",
                "package": "@observablehq/plot",
                "confidence": "low",
                "notes": ["Visualization focus", "Not a direct replacement"],
                "installCommand": "npm install @observablehq/plot",
                "apiDifferences": ["Limited data manipulation", "Different API"],
            },
        ],
        "migrationComplexity": "no-equivalent",
        "recommendations": ["Keep pandas backend with API layer", "Consider WebAssembly solutions"],
    },
    "numpy": {
        "pythonLibrary": "numpy",
        "typeScriptEquivalents": [
            {
                "name": "ML-Matrix",
                "package": "ml-matrix",
                "confidence": "medium",
                "notes": ["Basic matrix operations", "Limited compared to NumPy"],
                "installCommand": "npm install ml-matrix",
                "apiDifferences": ["Smaller API surface", "Different performance characteristics"],
            },
        ],
        "migrationComplexity": "complex",
        "recommendations": ["Consider keeping NumPy backend", "Evaluate WebAssembly options"],
    },

    # HTTP clients
    "requests": {
        "pythonLibrary": "requests",
        "typeScriptEquivalents": [
            {
                "name": "Axios",
                "package": "axios",
                "confidence": "high",
                "notes": ["Similar API design", "Promise-based", "Interceptors"],
                "installCommand": "npm install axios",
                "apiDifferences": ["Promise-based vs blocking", "Different error handling"],
            },
            {
                "name": "Fetch API",
                "package": "node-fetch",
                "confidence": "high",
                "notes": ["Native browser API", "Lighter weight"],
                "installCommand": "npm install node-fetch @types/node-fetch",
                "apiDifferences": ["More verbose", "Manual JSON parsing"],
            },
        ],
        "migrationComplexity": "simple",
        "recommendations": ["Axios for complex HTTP needs", "Fetch for simple requests"],
    },

    # Database
    "sqlalchemy": {
        "pythonLibrary": "sqlalchemy",
        "typeScriptEquivalents": [
            {
                "name": "TypeORM",
                "package": "typeorm",
                "confidence": "high",
                "notes": ["Decorator-based", "Similar to SQLAlchemy", "TypeScript native"],
                "installCommand": "npm install typeorm",
                "apiDifferences": ["Decorator syntax", "Different query builder"],
            },
            {
                "name": "Prisma",
                "package": "prisma",
                "confidence": "high",
                "notes": ["Type-safe", "Schema-first", "Auto-generated client"],
                "installCommand": "npm install prisma @prisma/client",
                "apiDifferences": ["Schema definition language", "Generated client"],
            },
        ],
        "migrationComplexity": "moderate",
        "recommendations": ["TypeORM for SQLAlchemy-like experience", "Prisma for type safety"],
    },
    "pydantic": {
        "pythonLibrary": "pydantic",
        "typeScriptEquivalents": [
            {
                "name": "Zod",
                "package": "zod",
                "confidence": "high",
                "notes": ["Runtime validation with inferred static types"],
                "installCommand": "npm install zod",
                "apiDifferences": ["Schemas are values, not classes", "No implicit coercion"],
            },
        ],
        "migrationComplexity": "simple",
        "recommendations": ["Derive TypeScript types from Zod schemas with z.infer"],
    },

    # Testing
    "pytest": {
        "pythonLibrary": "pytest",
        "typeScriptEquivalents": [
            {
                "name": "Jest",
                "package": "jest",
                "confidence": "high",
                "notes": ["Full-featured", "Snapshot testing", "Mocking"],
                "installCommand": "npm install jest @types/jest",
                "apiDifferences": ["Different assertion syntax", "Built-in mocking"],
            },
            {
                "name": "Vitest",
                "package": "vitest",
                "confidence": "high",
                "notes": ["Fast", "Vite-powered", "Jest-compatible"],
                "installCommand": "npm install vitest",
                "apiDifferences": ["Faster execution", "ESM native"],
            },
        ],
        "migrationComplexity": "simple",
        "recommendations": ["Jest for mature ecosystem", "Vitest for modern projects"],
    },
}

# =============================================================================
# Pattern mappings
# =============================================================================
PATTERN_MAPPINGS = [
    {
        "pythonPattern": "List Comprehension",
        "description": "Python list comprehension syntax",
        "typeScriptEquivalent": "Array.map/filter/reduce",
        "explanation": "Convert list comprehensions to functional array methods",
        "complexity": "simple",
        "caveats": ["Less readable for complex expressions", "May need multiple chained calls"],
        "examples": [
            {
                "python": "numbers: list[int] = [1, 2, 3, 4]\nresult: list[int] = [x * 2 for x in numbers if x > 0]",
                "typescript": "const numbers: number[] = [1, 2, 3, 4];\nconst result: number[] = numbers.filter(x => x > 0).map(x => x * 2);",
                "notes": "list[T] maps directly to T[]",
            },
        ],
    },
    {
        "pythonPattern": "Dict Comprehension",
        "description": "Python dictionary comprehension",
        "typeScriptEquivalent": "Object.fromEntries + Array methods",
        "explanation": "Use Object.fromEntries with array transformations",
        "complexity": "moderate",
        "caveats": ["More verbose", "Consider Map for dynamic keys"],
        "examples": [
            {
                "python": "{k: v * 2 for k, v in items.items() if v > 0}",
                "typescript": "Object.fromEntries(Object.entries(items).filter(([k, v]) => v > 0).map(([k, v]) => [k, v * 2]))",
                "notes": "Use Map for better performance with dynamic keys",
            },
        ],
    },
    {
        "pythonPattern": "Context Manager (with statement)",
        "description": "Python context manager pattern",
        "typeScriptEquivalent": "try/finally or using declarations",
        "explanation": "Manual resource management or the explicit resource management proposal",
        "complexity": "complex",
        "caveats": ["No automatic resource management before TypeScript 5.2", "Must remember cleanup"],
        "examples": [
            {
                "python": "with open('file.txt') as f:\n    content = f.read()",
                "typescript": "const f = await fs.open('file.txt');\ntry {\n  const content = await f.readFile();\n} finally {\n  await f.close();\n}",
                "notes": "Consider using library wrappers for common patterns",
            },
        ],
    },
    {
        "pythonPattern": "Multiple Assignment",
        "description": "Tuple unpacking and multiple assignment",
        "typeScriptEquivalent": "Destructuring assignment",
        "explanation": "Use array/object destructuring",
        "complexity": "simple",
        "caveats": ["Array destructuring for sequences", "Object destructuring for named values"],
        "examples": [
            {
                "python": "a, b = get_pair()",
                "typescript": "const [a, b] = getPair();",
                "notes": "TypeScript destructuring is very similar",
            },
        ],
    },
    {
        "pythonPattern": "Union Type Operator",
        "description": "Python 3.10+ union type syntax using the | operator",
        "typeScriptEquivalent": "TypeScript union types",
        "explanation": "Pipe unions map one-to-one onto TypeScript union types",
        "complexity": "simple",
        "caveats": ["Runtime type checking still needed"],
        "examples": [
            {
                "python": "def process_data(value: str | int | None) -> str:\n    if value is None:\n        return 'empty'\n    return str(value)",
                "typescript": "function processData(value: string | number | null): string {\n  if (value === null) {\n    return 'empty';\n  }\n  return String(value);\n}",
                "notes": "Identical syntax on both sides",
            },
        ],
    },
    {
        "pythonPattern": "Dict Merge Operator",
        "description": "Python 3.9+ dictionary merge operators | and |=",
        "typeScriptEquivalent": "Object spread operator or Object.assign",
        "explanation": "Use object spread for merging, no direct |= equivalent",
        "complexity": "simple",
        "caveats": ["No mutating merge equivalent to |=", "Spread creates new object"],
        "examples": [
            {
                "python": "merged = dict1 | dict2\ndict1 |= dict2",
                "typescript": "const merged = {...dict1, ...dict2};\nObject.assign(dict1, dict2);",
                "notes": "Use Object.assign for mutation, spread for immutable merge",
            },
        ],
    },
    {
        "pythonPattern": "String Prefix/Suffix Methods",
        "description": "Python 3.9+ removeprefix() and removesuffix() methods",
        "typeScriptEquivalent": "String slice with startsWith/endsWith",
        "explanation": "Manually implement prefix/suffix removal logic",
        "complexity": "simple",
        "caveats": ["No built-in methods", "Must check before removing"],
        "examples": [
            {
                "python": "text.removeprefix('hello_')",
                "typescript": "text.startsWith('hello_') ? text.slice('hello_'.length) : text",
                "notes": "Consider creating utility functions for common use cases",
            },
        ],
    },
    {
        "pythonPattern": "Built-in Generic Types",
        "description": "Python 3.9+ built-in generic collections without typing imports",
        "typeScriptEquivalent": "TypeScript built-in array and object types",
        "explanation": "Direct mapping to TypeScript's native generic types",
        "complexity": "simple",
        "caveats": ["No typing imports needed"],
        "examples": [
            {
                "python": "names: list[str]\nages: dict[str, int]\ncoords: tuple[float, float]\nids: set[int]",
                "typescript": "let names: string[];\nlet ages: Record<string, number>;\nlet coords: readonly [number, number];\nlet ids: Set<number>;",
                "notes": "Built-in generics align better with TypeScript than typing aliases",
            },
        ],
    },
]

# =============================================================================
# Validation strategies
# =============================================================================
VALIDATION_STRATEGIES = {
    "type-safety": {
        "name": "Type Safety Validation",
        "description": "Ensure TypeScript types correctly represent Python behavior",
        "complexity": "moderate",
        "tools": ["TypeScript compiler", "tsc --noEmit", "ESLint TypeScript rules"],
        "steps": [
            "Enable strict mode in tsconfig.json",
            "Use TypeScript compiler to check for type errors",
            "Set up ESLint with TypeScript rules",
            "Add type assertions for complex conversions",
            "Use branded types for domain-specific values",
        ],
        "examples": [
            "Verify union types handle all Python cases",
            "Check optional types for None handling",
            "Validate generic type parameters",
        ],
    },
    "behavioral": {
        "name": "Behavioral Equivalence Testing",
        "description": "Verify TypeScript code produces same results as Python",
        "complexity": "complex",
        "tools": ["Jest", "Property-based testing", "Golden master testing"],
        "steps": [
            "Set up parallel test suites",
            "Create property-based tests with fast-check",
            "Implement golden master testing for complex functions",
            "Test edge cases and error conditions",
            "Compare outputs with structured diff tools",
        ],
        "examples": [
            "Compare function outputs for same inputs",
            "Test error handling equivalence",
            "Validate data structure transformations",
        ],
    },
    "performance": {
        "name": "Performance Validation",
        "description": "Ensure TypeScript version meets performance requirements",
        "complexity": "moderate",
        "tools": ["Node.js profiler", "Benchmark.js", "Chrome DevTools"],
        "steps": [
            "Set up performance benchmarks",
            "Profile memory usage patterns",
            "Compare execution times",
            "Identify performance bottlenecks",
            "Optimize critical paths",
        ],
        "examples": [
            "Benchmark algorithm implementations",
            "Memory usage comparison",
            "Throughput testing for data processing",
        ],
    },
}


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CatalogError(f"{field} is required and must be a non-empty string")
    return value.strip()


def find_library_mapping(python_library: str) -> dict:
    """
    Look up TypeScript equivalents for a Python library.

    Args:
        python_library: Library name, case-insensitive (e.g. 'requests')

    Returns:
        The mapping with ``found: True``, or ``found: False`` with suggestions

    Raises:
        CatalogError: If the name is empty or not a string
    """
    name = _require_text(python_library, "pythonLibrary")
    mapping = LIBRARY_MAPPINGS.get(name.lower())

    if mapping is None:
        return {
            "pythonLibrary": name,
            "found": False,
            "message": "No direct mapping found. Consider checking npm registry or creating custom implementation.",
            "suggestions": [
                "Search npm for similar functionality",
                "Check awesome-typescript lists",
                "Consider keeping Python backend with API interface",
            ],
            "knownLibraries": sorted(LIBRARY_MAPPINGS),
        }

    result = copy.deepcopy(mapping)
    result["found"] = True
    return result


def find_pattern(query: str) -> dict:
    """Return the first pattern whose name or description contains ``query``."""
    needle = _require_text(query, "pattern").lower()

    for pattern in PATTERN_MAPPINGS:
        if needle in pattern["pythonPattern"].lower() or needle in pattern["description"].lower():
            result = copy.deepcopy(pattern)
            result["found"] = True
            return result

    return {
        "pattern": query,
        "found": False,
        "availablePatterns": [p["pythonPattern"] for p in PATTERN_MAPPINGS],
    }


def get_validation_strategy(validation_type: str) -> dict:
    key = _require_text(validation_type, "validationType").lower()
    strategy = VALIDATION_STRATEGIES.get(key)

    if strategy is None:
        return {
            "validationType": validation_type,
            "found": False,
            "availableStrategies": list(VALIDATION_STRATEGIES),
            "message": "Available validation strategies: " + ", ".join(VALIDATION_STRATEGIES),
        }

    result = copy.deepcopy(strategy)
    result["found"] = True
    return result
