"""
Mapping, classification and end-to-end analysis tests.
"""

import pytest

from type_analysis import (
    NOTE_DICT_KEYS,
    NOTE_LEGACY_PREFIX,
    NOTE_LIST_ELEMENTS,
    NOTE_MODERN_SYNTAX,
    NOTE_OPTIONAL_ABSENT,
    NOTE_TYPE_GUARDS,
    NOTE_UNION_BRANCHES,
    Confidence,
    MigrationComplexity,
    TypeAnalyzer,
    analyze_type,
    parse_type_string,
    render_analysis,
)


def mapped(analyzer, text):
    return analyzer.map_type(parse_type_string(text))


def complexity(analyzer, text):
    return analyzer.assess_complexity(parse_type_string(text))


class TestConfidence:
    def test_weakest(self):
        levels = [Confidence.HIGH, Confidence.LOW, Confidence.MEDIUM]
        assert Confidence.weakest(levels) is Confidence.LOW

    def test_weakest_of_nothing_is_high(self):
        assert Confidence.weakest([]) is Confidence.HIGH


class TestMapping:
    @pytest.mark.parametrize("text,name", [
        ("int", "number"),
        ("str", "string"),
        ("bool", "boolean"),
        ("None", "null"),
        ("bytes", "Uint8Array"),
    ])
    def test_primitives(self, analyzer, text, name):
        assert mapped(analyzer, text).name == name

    def test_builtin_generic_composes_arguments(self, analyzer):
        mapping = mapped(analyzer, "dict[str, list[int]]")
        assert mapping.name == "Record<string, number[]>"
        assert mapping.confidence is Confidence.MEDIUM
        assert [m.name for m in mapping.nested_arguments] == ["string", "number[]"]

    def test_legacy_alias_matches_modern(self, analyzer):
        assert mapped(analyzer, "List[int]").name == mapped(analyzer, "list[int]").name

    def test_typing_qualified_name_uses_builtin_table(self, analyzer):
        assert mapped(analyzer, "typing.List[str]").name == "string[]"

    def test_union_element_in_array_is_parenthesized(self, analyzer):
        assert mapped(analyzer, "list[int | str]").name == "(number | string)[]"

    def test_tuple(self, analyzer):
        assert mapped(analyzer, "tuple[int, str]").name == "readonly [number, string]"

    def test_variadic_tuple(self, analyzer):
        mapping = mapped(analyzer, "tuple[int, ...]")
        assert mapping.name == "readonly number[]"
        assert mapping.confidence is Confidence.HIGH

    def test_set_and_frozenset(self, analyzer):
        assert mapped(analyzer, "set[str]").name == "Set<string>"
        assert mapped(analyzer, "frozenset[int]").name == "ReadonlySet<number>"

    @pytest.mark.parametrize("text,name", [
        ("Callable[[int, str], bool]", "(arg0: number, arg1: string) => boolean"),
        ("Callable[[], None]", "() => null"),
        ("Callable[..., int]", "(...args: unknown[]) => number"),
    ])
    def test_callable_signatures(self, analyzer, text, name):
        mapping = mapped(analyzer, text)
        assert mapping.name == name
        assert mapping.confidence is Confidence.MEDIUM

    def test_malformed_callable_is_low(self, analyzer):
        mapping = mapped(analyzer, "Callable[int]")
        assert mapping.confidence is Confidence.LOW

    def test_wrong_arity_is_low(self, analyzer):
        mapping = mapped(analyzer, "dict[str]")
        assert mapping.name == "Record<string, unknown>"
        assert mapping.confidence is Confidence.LOW
        assert any("expects 2 type argument(s), got 1" in note for note in mapping.notes)

    def test_library_type(self, analyzer):
        mapping = mapped(analyzer, "datetime.datetime")
        assert mapping.name == "Date"
        assert mapping.confidence is Confidence.HIGH

    def test_library_type_carries_imports(self, analyzer):
        mapping = mapped(analyzer, "decimal.Decimal")
        assert mapping.imports == ("decimal.js",)
        assert mapping.confidence is Confidence.LOW

    def test_unknown_type(self, analyzer):
        mapping = mapped(analyzer, "mylib.Widget")
        assert mapping.name == "unknown"
        assert mapping.confidence is Confidence.LOW
        assert "Unknown Python type: mylib.Widget" in mapping.notes

    def test_union(self, analyzer):
        mapping = mapped(analyzer, "str | int | None")
        assert mapping.name == "string | number | null"
        assert mapping.confidence is Confidence.HIGH
        assert NOTE_UNION_BRANCHES in mapping.notes

    def test_union_takes_weakest_branch(self, analyzer):
        mapping = mapped(analyzer, "int | Foo")
        assert mapping.confidence is Confidence.LOW
        assert "Type argument 'Foo' has no reliable TypeScript mapping" in mapping.notes

    def test_optional(self, analyzer):
        mapping = mapped(analyzer, "Optional[str]")
        assert mapping.name == "string | undefined"
        assert mapping.confidence is Confidence.HIGH
        assert NOTE_OPTIONAL_ABSENT in mapping.notes

    def test_generic_with_unknown_argument_is_not_high(self, analyzer):
        mapping = mapped(analyzer, "list[Foo]")
        assert mapping.name == "unknown[]"
        assert mapping.confidence is Confidence.LOW

    def test_library_generic_composes_arguments(self, analyzer):
        mapping = mapped(analyzer, "collections.OrderedDict[str, int]")
        assert mapping.name == "Map<string, number>"
        assert mapping.confidence is Confidence.HIGH
        assert [m.name for m in mapping.nested_arguments] == ["string", "number"]

    def test_library_generic_with_unknown_argument_is_not_high(self, analyzer):
        mapping = mapped(analyzer, "collections.OrderedDict[str, Foo]")
        assert mapping.confidence is Confidence.LOW
        assert "Type argument 'Foo' has no reliable TypeScript mapping" in mapping.notes
        assert len(mapping.nested_arguments) == 2

    def test_library_generic_without_template_keeps_arguments(self, analyzer):
        mapping = mapped(analyzer, "typing.Literal['a']")
        assert mapping.name == "literal"
        assert mapping.confidence is Confidence.LOW
        assert len(mapping.nested_arguments) == 1
        assert any("'a'" in note for note in mapping.notes)

    def test_arguments_on_non_generic_builtin(self, analyzer):
        mapping = mapped(analyzer, "int[str]")
        assert mapping.name == "number"
        assert mapping.confidence is Confidence.LOW
        assert "int is not generic; type arguments are ignored" in mapping.notes
        assert complexity(analyzer, "int[str]") is MigrationComplexity.REQUIRES_REDESIGN


class TestComplexity:
    @pytest.mark.parametrize("text,expected", [
        ("int", MigrationComplexity.TRIVIAL),
        ("Optional[str]", MigrationComplexity.TRIVIAL),
        ("list[int]", MigrationComplexity.TRIVIAL),
        ("datetime.datetime", MigrationComplexity.TRIVIAL),
        ("dict[str, int]", MigrationComplexity.SIMPLE),
        ("bytes", MigrationComplexity.SIMPLE),
        ("Callable[[int], str]", MigrationComplexity.SIMPLE),
        ("int | str | float | bool", MigrationComplexity.MODERATE),
        ("object", MigrationComplexity.COMPLEX),
        ("list[object]", MigrationComplexity.COMPLEX),
        ("Any", MigrationComplexity.REQUIRES_REDESIGN),
        ("Foo", MigrationComplexity.REQUIRES_REDESIGN),
        ("decimal.Decimal", MigrationComplexity.REQUIRES_REDESIGN),
    ])
    def test_rules(self, analyzer, text, expected):
        assert complexity(analyzer, text) is expected

    def test_three_branch_union_is_not_moderate(self, analyzer):
        assert complexity(analyzer, "int | str | None") is MigrationComplexity.TRIVIAL

    def test_threshold_is_configurable(self):
        relaxed = TypeAnalyzer(union_branch_threshold=5)
        assert complexity(relaxed, "int | str | float | bool") is MigrationComplexity.TRIVIAL

    def test_classification_is_deterministic(self, analyzer):
        expr = parse_type_string("dict[str, list[int | None]]")
        assert len({analyzer.assess_complexity(expr) for _ in range(5)}) == 1


class TestAdvisories:
    def test_dict_notes(self, analyzer):
        result = analyzer.analyze("dict[str, int]")
        assert NOTE_DICT_KEYS in result.conversion_notes
        assert NOTE_MODERN_SYNTAX in result.conversion_notes
        assert "Object iteration order guaranteed in modern JavaScript" in result.runtime_considerations

    def test_list_note(self, analyzer):
        assert NOTE_LIST_ELEMENTS in analyzer.analyze("list[str]").conversion_notes

    def test_union_notes(self, analyzer):
        result = analyzer.analyze("int | str")
        assert NOTE_TYPE_GUARDS in result.conversion_notes
        assert "Runtime type checking needed for union types" in result.runtime_considerations
        assert "Test all union type branches" in result.testing_approach

    def test_legacy_upgrade_note(self, analyzer):
        notes = analyzer.analyze("Optional[List[int]]").conversion_notes
        assert f"{NOTE_LEGACY_PREFIX}: write 'list[int] | None' instead of 'Optional[List[int]]'" in notes

    def test_modern_syntax_has_no_upgrade_note(self, analyzer):
        notes = analyzer.analyze("list[int] | None").conversion_notes
        assert not any(note.startswith(NOTE_LEGACY_PREFIX) for note in notes)

    def test_notes_are_unique(self, analyzer):
        notes = analyzer.analyze("dict[str, dict[str, int]]").conversion_notes
        assert len(notes) == len(set(notes))

    def test_runtime_walks_nested_arguments(self, analyzer):
        considerations = analyzer.analyze("list[dict[str, int]]").runtime_considerations
        assert "JavaScript number precision limits (53-bit integers)" in considerations
        assert "Unicode handling differences between Python and JavaScript" in considerations

    def test_optional_testing(self, analyzer):
        testing = analyzer.analyze("Optional[int]").testing_approach
        assert testing[0] == "Basic unit tests for type conversion"
        assert "Test undefined/null handling" in testing

    def test_datetime_caveats(self, analyzer):
        result = analyzer.analyze("datetime.datetime")
        assert "Consider using date-fns or day.js for better date handling" in result.conversion_notes


class TestAnalyzeType:
    def test_success_shape(self):
        result = analyze_type({"typeExpression": "int"})
        assert set(result) == {
            "pythonType",
            "typeScriptMapping",
            "conversionNotes",
            "runtimeConsiderations",
            "testingApproach",
            "migrationComplexity",
        }
        assert result["typeScriptMapping"]["name"] == "number"
        assert result["typeScriptMapping"]["confidence"] == "high"
        assert result["migrationComplexity"] == "trivial"

    def test_python_type_alias(self):
        result = analyze_type({"pythonType": "str"})
        assert result["typeScriptMapping"]["name"] == "string"

    def test_context_is_accepted(self):
        result = analyze_type({"typeExpression": "int", "context": "function parameter"})
        assert "error" not in result

    def test_parse_failure(self):
        result = analyze_type({"typeExpression": "Foo[Bar"})
        assert result["status"] == "failed"
        assert "Unbalanced brackets" in result["error"]

    @pytest.mark.parametrize("arguments", [
        {},
        {"typeExpression": ""},
        {"typeExpression": 42},
        {"typeExpression": "int", "context": 3},
        "int",
    ])
    def test_bad_input_fails_cleanly(self, arguments):
        result = analyze_type(arguments)
        assert result["status"] == "failed"
        assert result["error"]

    def test_mapping_imports_are_serialized(self):
        mapping = analyze_type({"typeExpression": "decimal.Decimal"})["typeScriptMapping"]
        assert mapping["imports"] == ["decimal.js"]
        assert mapping["alternatives"] == ["Decimal"]

    def test_analyzer_limits_apply(self):
        strict = TypeAnalyzer(max_length=10)
        result = analyze_type({"typeExpression": "dict[str, list[int]]"}, strict)
        assert result["status"] == "failed"

    def test_render_analysis(self, analyzer):
        text = render_analysis(analyzer.analyze("Optional[str]"))
        assert "string | undefined" in text
        assert "trivial" in text
