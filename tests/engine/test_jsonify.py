from __future__ import annotations

import pytest

from feed_summarizer.engine import compile_template, extract_and_format, extract_values, find_candidates
from feed_summarizer.engine.templates import load_output_template
from feed_summarizer.errors import (
    AggregatedError,
    ExtractionItemFailure,
    ExtractionStage,
    MalformedArrayError,
    NoStructureFoundError,
)

HEADING_TEMPLATE = '{"title": {{ heading | tojson }}, "text": {{ summary | tojson }}}'


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (
            'Some text before {"heading": "Test Title", "summary": "Test Summary"} and after',
            ['{"heading": "Test Title", "summary": "Test Summary"}'],
        ),
        (
            'Text [{"heading": "Title 1"}, {"heading": "Title 2"}]',
            ['[{"heading": "Title 1"}, {"heading": "Title 2"}]'],
        ),
        ('{"a": 1} then {"b": 2}', ['{"a": 1}', '{"b": 2}']),
        ('{"a": {"b": {"c": [1, [2]]}}}', ['{"a": {"b": {"c": [1, [2]]}}}']),
        ('{"text": "a } inside [ a string"}', ['{"text": "a } inside [ a string"}']),
        ("unbalanced { here", []),
        ("Text with no JSON", []),
    ],
)
def test_find_candidates(text: str, expected: list[str]) -> None:
    assert find_candidates(text) == expected


def test_find_candidates_skips_mismatched_opener() -> None:
    assert find_candidates('{ ] {"ok": true}') == ['{"ok": true}']


def test_extract_values_flattens_arrays_one_level() -> None:
    values = extract_values('```json\n[{"a": 1}, [2, 3]]\n```\nand {"b": 4}')
    assert [value.raw for value in values] == ['{"a": 1}', "[2, 3]", '{"b": 4}']


def test_extract_single_object(identity_template) -> None:
    assert extract_and_format('{"a":1}', identity_template) == [{"a": 1}]


def test_extract_array_preserves_order(identity_template) -> None:
    result = extract_and_format('[{"a":1},{"a":2}]', identity_template)
    assert result == [{"a": 1}, {"a": 2}]


def test_extract_discovery_order_across_candidates(identity_template) -> None:
    text = 'first {"n": 0} then [{"n": 1}, {"n": 2}] and finally {"n": 3}'
    result = extract_and_format(text, identity_template)
    assert [value["n"] for value in result] == [0, 1, 2, 3]


def test_extract_reshapes_nested_fields() -> None:
    template = compile_template('{"heading": {{ heading | tojson }}, "author": {{ details.author | tojson }}}')
    text = (
        'Here you go: [{"heading": "H1", "details": {"author": "A1"}},'
        ' {"heading": "H2", "details": {"author": "A2"}}]'
    )
    assert extract_and_format(text, template) == [
        {"heading": "H1", "author": "A1"},
        {"heading": "H2", "author": "A2"},
    ]


def test_extract_no_structure(identity_template) -> None:
    with pytest.raises(NoStructureFoundError):
        extract_and_format("no json here", identity_template)


def test_extract_malformed_array(identity_template) -> None:
    with pytest.raises(MalformedArrayError):
        extract_and_format("[not, valid]", identity_template)


def test_extract_malformed_array_aborts_even_after_valid_candidates(identity_template) -> None:
    with pytest.raises(MalformedArrayError):
        extract_and_format('{"a": 1} and [oops]', identity_template)


def test_extract_no_partial_success_on_missing_field() -> None:
    template = compile_template(HEADING_TEMPLATE)
    text = '[{"heading": "H1", "summary": "S1"}, {"heading": "H2"}]'

    with pytest.raises(AggregatedError) as excinfo:
        extract_and_format(text, template)

    (failure,) = excinfo.value.causes
    assert isinstance(failure, ExtractionItemFailure)
    assert failure.stage is ExtractionStage.RENDER
    assert failure.value == '{"heading": "H2"}'


def test_extract_reports_invalid_object_as_decode_failure(identity_template) -> None:
    with pytest.raises(AggregatedError) as excinfo:
        extract_and_format('{"a": 1} {not json}', identity_template)
    (failure,) = excinfo.value.causes
    assert failure.stage is ExtractionStage.DECODE


def test_extract_reports_invalid_render_as_redecode_failure() -> None:
    template = compile_template("{{ heading }}")
    with pytest.raises(AggregatedError) as excinfo:
        extract_and_format('[{"heading": "H1"}, {"heading": "H2"}]', template)
    assert [failure.stage for failure in excinfo.value.causes] == [
        ExtractionStage.REDECODE,
        ExtractionStage.REDECODE,
    ]


def test_extract_scalar_elements_use_item() -> None:
    template = compile_template('{"value": {{ item | tojson }}}')
    assert extract_and_format("[1, \"two\"]", template) == [{"value": 1}, {"value": "two"}]


def test_default_output_template() -> None:
    template = load_output_template()
    text = 'Summary:\n[{"heading": "Héading", "summary": "Line \\"quoted\\"", "link": "https://e.com/1"}, {"heading": "H2", "summary": "S2"}]'
    assert extract_and_format(text, template) == [
        {"heading": "Héading", "summary": 'Line "quoted"', "link": "https://e.com/1"},
        {"heading": "H2", "summary": "S2", "link": ""},
    ]


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_extract_rejects_non_json_constants(identity_template, token: str) -> None:
    with pytest.raises(AggregatedError) as excinfo:
        extract_and_format(f'{{"a": 1}} {{"score": {token}}}', identity_template)
    (failure,) = excinfo.value.causes
    assert failure.stage is ExtractionStage.DECODE
    assert token in str(failure.cause)


def test_extract_rejects_non_json_constants_in_arrays(identity_template) -> None:
    with pytest.raises(MalformedArrayError):
        extract_and_format("[1, NaN]", identity_template)


def test_extract_rejects_non_json_constants_after_render() -> None:
    template = compile_template('{"v": {{ heading }}}')
    with pytest.raises(AggregatedError) as excinfo:
        extract_and_format('{"heading": "NaN"}', template)
    (failure,) = excinfo.value.causes
    assert failure.stage is ExtractionStage.REDECODE


def test_extract_field_named_item_is_not_shadowed() -> None:
    template = compile_template('{"name": {{ item | tojson }}}')
    assert extract_and_format('{"item": "Widget"}', template) == [{"name": "Widget"}]
