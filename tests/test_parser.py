from __future__ import annotations

import pytest

from stache import Block, EscapedReplacement, TemplateContent, TemplateParseError, parse
from stache.builder import rule_name
from stache.parser import closing_tag, parse_tree


def _kinds(source: str) -> list[str]:
    tree = parse_tree(source)
    body = tree.children[0]
    return [rule_name(child) for child in body.children]


def test_plain_text_is_one_content_node() -> None:
    assert parse("Ho hi !") == Block(items=[TemplateContent("Ho hi !")])


def test_multiline_text_without_tags() -> None:
    source = "line one\n  line two }\n\tend"
    assert parse(source) == Block(items=[TemplateContent(source)])


def test_empty_template() -> None:
    assert parse("") == Block(items=[])


def test_loose_curlies_stay_literal() -> None:
    assert parse("} Hi { hey } {") == Block(items=[TemplateContent("} Hi { hey } {")])


def test_groups_of_single_curlies() -> None:
    assert parse("{ Hi }{ hey }") == Block(items=[TemplateContent("{ Hi }{ hey }")])


def test_closing_curly_before_replacement() -> None:
    assert parse("Hi }{{ hey }}") == Block(
        items=[TemplateContent("Hi }"), EscapedReplacement("hey")]
    )
    assert parse("}{{ hey }}") == Block(items=[TemplateContent("}"), EscapedReplacement("hey")])


def test_doubled_closing_braces_in_text() -> None:
    assert parse("a }} b") == Block(items=[TemplateContent("a }} b")])


def test_trailing_brace_after_replacement_is_text() -> None:
    assert parse("{{x}}}") == Block(items=[EscapedReplacement("x"), TemplateContent("}")])


def test_tag_forms_are_recognized() -> None:
    assert _kinds("a{{b}}c") == ["content", "escaped_replacement", "content"]
    assert _kinds("{{{b}}}") == ["replacement"]
    assert _kinds("{{b c}}") == ["escaped_helper"]
    assert _kinds("{{{b c}}}") == ["helper"]
    assert _kinds("{{> b}}") == ["partial"]
    assert _kinds("{{#b}}x{{/b}}") == ["block_helper"]
    assert _kinds("{{#b c as |d|}}x{{/b}}") == ["as_block_helper"]


def test_special_identifier_characters() -> None:
    for name in ("@first", "@index", "is-ok?", "snake_case", "123"):
        assert parse("{{%s}}" % name) == Block(items=[EscapedReplacement(name)])


def test_else_is_allowed_as_path_segment() -> None:
    assert parse("{{branch.else}}") == Block(items=[EscapedReplacement("branch.else")])


def test_bare_else_is_not_a_replacement() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{else}}")
    with pytest.raises(TemplateParseError):
        parse("before {{ else }} after")


def test_trim_marker_must_touch_braces() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{ ~x}}")
    with pytest.raises(TemplateParseError):
        parse("{{x~ }}")


def test_mismatched_closing_tag_fails() -> None:
    with pytest.raises(TemplateParseError) as info:
        parse("{{#foo}}body{{/bar}}")
    err = info.value
    assert err.expected == ("{{/foo}}",)
    assert err.found == "bar"
    assert err.position == len("{{#foo}}body{{/")


def test_mismatch_reports_line_and_column() -> None:
    with pytest.raises(TemplateParseError) as info:
        parse("line one\n{{#if a}}x{{/fi}}")
    err = info.value
    assert (err.line, err.column) == (2, 14)
    assert err.position == 22
    assert "2:14" in str(err)


def test_crossed_blocks_report_earliest_mismatch() -> None:
    source = "{{#a}}{{#b}}{{/a}}{{/b}}"
    with pytest.raises(TemplateParseError) as info:
        parse(source)
    assert info.value.expected == ("{{/b}}",)
    assert info.value.position == source.index("a}}{{/b")


def test_closing_tag_parser_is_built_from_name() -> None:
    pattern = closing_tag("each")
    assert pattern.fullmatch("{{/each}}")
    assert pattern.fullmatch("{{~/each ~}}")
    assert not pattern.fullmatch("{{/eachx}}")
    assert not pattern.fullmatch("{{/if}}")


def test_closing_tag_escapes_name() -> None:
    assert closing_tag("is-ok?").fullmatch("{{/is-ok?}}")
    assert not closing_tag("is-ok?").fullmatch("{{/is-ok}}")


def test_unterminated_tag() -> None:
    with pytest.raises(TemplateParseError) as info:
        parse("{{foo")
    assert info.value.position == 5
    assert (info.value.line, info.value.column) == (1, 6)


def test_unterminated_block() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{#if a}}never closed")


def test_unterminated_string() -> None:
    with pytest.raises(TemplateParseError):
        parse('{{upper "oops}}')


def test_mixed_quotes_do_not_close_string() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{upper \"oops'}}")


def test_single_brace_pairs_are_text() -> None:
    for source in ("{}", '{"a": {}}', "function() { return {}; }", "trailing {"):
        assert parse(source) == Block(items=[TemplateContent(source)])


def test_single_brace_pair_before_tag() -> None:
    assert parse("{}{{x}}") == Block(items=[TemplateContent("{}"), EscapedReplacement("x")])


def test_second_else_in_block_fails() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{#if a}}x{{else}}y{{else}}z{{/if}}")


def test_as_introducer_is_not_a_parameter() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{concat a as |b|}}")


def test_as_block_requires_parameters() -> None:
    with pytest.raises(TemplateParseError):
        parse("{{#each as |item|}}x{{/each}}")


def test_non_string_source_is_rejected() -> None:
    with pytest.raises(TypeError):
        parse(b"{{x}}")


def test_parse_error_lists_expected_tokens() -> None:
    with pytest.raises(TemplateParseError) as info:
        parse("{{#if a}}x")
    assert info.value.expected
    assert "expected one of" in str(info.value)
