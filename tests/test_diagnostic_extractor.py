import json

import pytest

from near_contract_builder.domain.models.build_outcome import Position, Severity
from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage
from near_contract_builder.infrastructure.adapters.message_parsing import CargoMessageParser, DiagnosticExtractor
from near_contract_builder.infrastructure.adapters.message_parsing.diagnostic_extractor import documentation_for

from cargo_messages import artifact_message, compiler_message, span


@pytest.fixture
def extractor():
    return DiagnosticExtractor()


def as_raw(message):
    return CargoMessageParser().parse_line(json.dumps(message))


def test_error_with_primary_span(extractor):
    message = compiler_message(rendered="error[E0308]: mismatched types", code="E0308")
    diagnostics = extractor.extract(as_raw(message))

    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.file_path == "src/lib.rs"
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.range.start == Position(2, 4)
    assert diagnostic.range.end == Position(2, 11)
    assert diagnostic.message == "error[E0308]: mismatched types"
    assert diagnostic.documentation_url is None


def test_warning_is_kept(extractor):
    diagnostics = extractor.extract(as_raw(compiler_message(level="warning", message="unused variable: `x`")))
    assert [d.severity for d in diagnostics] == [Severity.WARNING]


@pytest.mark.parametrize("level", ["note", "help", "failure-note", "error: internal compiler error"])
def test_other_levels_are_ignored(extractor, level):
    assert extractor.extract(as_raw(compiler_message(level=level))) == []


def test_first_line_and_column_map_to_origin(extractor):
    message = compiler_message(spans=[span(line_start=1, line_end=1, column_start=1, column_end=1)])
    diagnostic = extractor.extract(as_raw(message))[0]
    assert diagnostic.range.start == Position(0, 0)
    assert diagnostic.range.end == Position(0, 0)


def test_inverted_span_is_clamped_to_start(extractor):
    message = compiler_message(spans=[span(line_start=10, line_end=4, column_start=3, column_end=1)])
    diagnostic = extractor.extract(as_raw(message))[0]
    assert diagnostic.range.start == Position(9, 2)
    assert diagnostic.range.end == diagnostic.range.start


def test_missing_coordinates_default_to_start(extractor):
    body = compiler_message()
    body["message"]["spans"] = [{"file_name": "src/lib.rs", "line_start": 7, "column_start": 2, "is_primary": True}]
    diagnostic = extractor.extract(as_raw(body))[0]
    assert diagnostic.range.start == Position(6, 1)
    assert diagnostic.range.end == Position(6, 1)


def test_secondary_spans_are_dropped(extractor):
    message = compiler_message(spans=[
        span(file_name="src/lib.rs", line_start=3),
        span(file_name="src/helpers.rs", line_start=20, line_end=20, is_primary=False),
    ])
    diagnostics = extractor.extract(as_raw(message))
    assert [d.file_path for d in diagnostics] == ["src/lib.rs"]


def test_every_primary_span_produces_a_diagnostic(extractor):
    message = compiler_message(spans=[
        span(file_name="src/lib.rs", line_start=3),
        span(file_name="src/state.rs", line_start=8, line_end=8),
    ])
    assert [d.file_path for d in extractor.extract(as_raw(message))] == ["src/lib.rs", "src/state.rs"]


def test_message_without_spans_yields_nothing(extractor):
    assert extractor.extract(as_raw(compiler_message(spans=[]))) == []


def test_rendered_text_preferred_over_message(extractor):
    with_rendered = compiler_message(message="short", rendered="long rendered form")
    without_rendered = compiler_message(message="short")
    assert extractor.extract(as_raw(with_rendered))[0].message == "long rendered form"
    assert extractor.extract(as_raw(without_rendered))[0].message == "short"


def test_non_diagnostic_messages_are_ignored(extractor):
    assert extractor.extract(as_raw(artifact_message("/tmp/out/hello_near.wasm"))) == []
    assert extractor.extract(RawMessage(kind=MessageKind.COMPILER_DIAGNOSTIC, payload={"message": "oops"})) == []


class TestDocumentationLinks:

    def test_near_sdk_link_uses_compiler_code(self, extractor):
        message = compiler_message(message="cannot find macro `near` in crate `near_sdk`", code="E0433")
        diagnostic = extractor.extract(as_raw(message))[0]
        assert diagnostic.documentation_url == "https://docs.rs/near-sdk/latest/near_sdk/"
        assert diagnostic.code == "E0433"

    def test_wasm_link_defaults_code(self, extractor):
        message = compiler_message(message="unsupported on WASM targets")
        diagnostic = extractor.extract(as_raw(message))[0]
        assert diagnostic.documentation_url == "https://docs.near.org/sdk/rust/quickstart"
        assert diagnostic.code == "near"

    def test_near_sdk_takes_priority_over_wasm(self):
        assert documentation_for("near_sdk does not build for wasm")["keyword"] == "near_sdk"

    def test_match_ignores_case(self):
        assert documentation_for("NEAR_SDK::env")["keyword"] == "near_sdk"

    def test_unrelated_text_has_no_link(self):
        assert documentation_for("borrowed value does not live long enough") is None
