"""
Parser tests: type strings to TypeExpression trees.
"""

import pytest

from type_analysis import (
    ParseError,
    TypeExpression,
    TypeKind,
    modern_spelling,
    parse_type_string,
)


class TestLeaves:
    def test_bare_identifier(self):
        expr = parse_type_string("int")
        assert expr == TypeExpression(name="int")
        assert not expr.is_generic
        assert not expr.is_union
        assert not expr.is_optional

    def test_dotted_identifier_splits_module(self):
        expr = parse_type_string("datetime.datetime")
        assert expr.name == "datetime"
        assert expr.module == "datetime"
        assert expr.qualified_name == "datetime.datetime"

    def test_deeply_dotted_identifier(self):
        expr = parse_type_string("os.path.PathLike")
        assert expr.module == "os.path"
        assert expr.name == "PathLike"

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_type_string("   str  ") == TypeExpression(name="str")


class TestGenerics:
    def test_modern_builtin_generic(self):
        expr = parse_type_string("list[int]")
        assert expr.kind is TypeKind.GENERIC
        assert expr.name == "list"
        assert expr.modern_syntax
        assert expr.args == (TypeExpression(name="int"),)

    def test_legacy_generic_is_not_modern(self):
        expr = parse_type_string("List[int]")
        assert expr.is_generic
        assert not expr.modern_syntax
        assert expr.uses_legacy_syntax

    def test_nested_generic_splits_only_top_level_commas(self):
        expr = parse_type_string("dict[str, list[int]]")
        assert [arg.name for arg in expr.args] == ["str", "list"]
        assert expr.args[1].args == (TypeExpression(name="int"),)

    def test_qualified_generic(self):
        expr = parse_type_string("collections.OrderedDict[str, int]")
        assert expr.module == "collections"
        assert expr.name == "OrderedDict"
        assert not expr.modern_syntax
        assert len(expr.args) == 2

    def test_callable_parameter_list(self):
        expr = parse_type_string("Callable[[int, str], bool]")
        params, returns = expr.args
        assert params.is_generic
        assert params.name == ""
        assert [arg.name for arg in params.args] == ["int", "str"]
        assert returns.name == "bool"

    def test_empty_parameter_list_is_leaf(self):
        params = parse_type_string("Callable[[], None]").args[0]
        assert params == TypeExpression(name="[]")

    def test_ellipsis_argument(self):
        expr = parse_type_string("tuple[int, ...]")
        assert expr.args[1] == TypeExpression(name="...")


class TestUnions:
    def test_pipe_union_is_flat(self):
        expr = parse_type_string("str | int | None")
        assert expr.is_union
        assert expr.modern_syntax
        assert [arg.name for arg in expr.args] == ["str", "int", "None"]

    def test_pipe_inside_brackets_is_not_top_level(self):
        expr = parse_type_string("list[int | str]")
        assert expr.is_generic
        assert expr.args[0].is_union

    def test_legacy_union(self):
        expr = parse_type_string("Union[int, str]")
        assert expr.is_union
        assert not expr.modern_syntax
        assert expr.uses_legacy_syntax

    def test_single_argument_union_collapses(self):
        assert parse_type_string("Union[int]") == TypeExpression(name="int")

    def test_optional(self):
        expr = parse_type_string("Optional[str]")
        assert expr.is_optional
        assert not expr.is_union
        assert expr.args == (TypeExpression(name="str"),)

    def test_typing_qualified_optional(self):
        assert parse_type_string("typing.Optional[int]").is_optional


class TestParseErrors:
    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_input(self, text):
        with pytest.raises(ParseError, match="empty"):
            parse_type_string(text)

    def test_non_string_input(self):
        with pytest.raises(ParseError, match="must be a string"):
            parse_type_string(None)

    def test_unclosed_bracket(self):
        with pytest.raises(ParseError, match="Unbalanced brackets"):
            parse_type_string("Foo[Bar")

    def test_unexpected_closing_bracket(self):
        with pytest.raises(ParseError, match="unexpected"):
            parse_type_string("list[int]]")

    def test_trailing_text(self):
        with pytest.raises(ParseError, match="after"):
            parse_type_string("list[int]x")

    def test_empty_argument_list(self):
        with pytest.raises(ParseError, match="Empty argument list"):
            parse_type_string("list[]")

    def test_empty_type_argument(self):
        with pytest.raises(ParseError, match="Empty type argument"):
            parse_type_string("dict[str, ]")

    def test_empty_union_alternative(self):
        with pytest.raises(ParseError, match="Empty union alternative"):
            parse_type_string("int |")

    def test_stray_comma(self):
        with pytest.raises(ParseError, match="outside brackets"):
            parse_type_string("int, str")

    def test_optional_with_two_arguments(self):
        with pytest.raises(ParseError, match="exactly one argument"):
            parse_type_string("Optional[int, str]")

    def test_invalid_generic_head(self):
        with pytest.raises(ParseError, match="Invalid generic type name"):
            parse_type_string("list-of[int]")

    def test_too_long(self):
        with pytest.raises(ParseError, match="exceeds limit"):
            parse_type_string("a" * 21, max_length=20)

    def test_too_deep(self):
        text = "list[" * 10 + "int" + "]" * 10
        with pytest.raises(ParseError, match="deeper than 5"):
            parse_type_string(text, max_depth=5)


class TestSerialization:
    @pytest.mark.parametrize("text", [
        "int",
        "dict[str, list[int]]",
        "Optional[datetime.datetime]",
        "Union[int, str]",
        "str | int | None",
        "Callable[[int, str], bool]",
        "tuple[int, ...]",
    ])
    def test_to_source_parses_back_to_same_tree(self, text):
        expr = parse_type_string(text)
        assert parse_type_string(expr.to_source()) == expr

    def test_to_dict_keys(self):
        data = parse_type_string("list[int]").to_dict()
        assert data == {
            "name": "list",
            "module": "",
            "isGeneric": True,
            "isUnion": False,
            "isOptional": False,
            "usesModernSyntax": True,
            "typeArguments": [{
                "name": "int",
                "module": "",
                "isGeneric": False,
                "isUnion": False,
                "isOptional": False,
                "usesModernSyntax": False,
                "typeArguments": [],
            }],
        }

    @pytest.mark.parametrize("text,expected", [
        ("List[int]", "list[int]"),
        ("Optional[str]", "str | None"),
        ("Union[int, str]", "int | str"),
        ("Dict[str, Optional[int]]", "dict[str, int | None]"),
        ("typing.List[int]", "list[int]"),
    ])
    def test_modern_spelling(self, text, expected):
        assert modern_spelling(parse_type_string(text)) == expected


class TestNodeInvariants:
    def test_leaf_with_arguments_is_rejected(self):
        with pytest.raises(ValueError):
            TypeExpression(name="int", args=(TypeExpression(name="str"),))

    def test_generic_without_arguments_is_rejected(self):
        with pytest.raises(ValueError):
            TypeExpression(name="list", kind=TypeKind.GENERIC)

    def test_walk_is_depth_first(self):
        expr = parse_type_string("dict[str, list[int]]")
        assert [node.name for node in expr.walk()] == ["dict", "str", "list", "int"]
