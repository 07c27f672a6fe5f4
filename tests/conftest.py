"""Pytest configuration and fixtures for py2ts tests."""

import json
from pathlib import Path

import pytest

from type_analysis import TypeAnalyzer
from type_tables import DEFAULT_TABLES, TypeTables


@pytest.fixture
def analyzer() -> TypeAnalyzer:
    """Analyzer over the built-in tables."""
    return TypeAnalyzer()


@pytest.fixture
def tables() -> TypeTables:
    return DEFAULT_TABLES


@pytest.fixture
def tables_file(tmp_path: Path) -> Path:
    """Write a small custom table file and return its path."""
    data = {
        "builtins": {
            "int": {"name": "bigint", "confidence": "high"},
            "list": {"name": "Array", "confidence": "high", "template": "Array<{0}>"},
        },
        "libraries": {
            "mylib": {
                "Widget": {
                    "name": "Widget",
                    "confidence": "medium",
                    "imports": ["@acme/widgets"],
                },
            },
        },
    }
    path = tmp_path / "tables.json"
    path.write_text(json.dumps(data))
    return path
