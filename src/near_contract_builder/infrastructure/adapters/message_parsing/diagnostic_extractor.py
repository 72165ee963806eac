"""
Turns cargo `compiler-message` messages into per-file diagnostics.
"""
import logging
from typing import Any, Dict, List, Optional

from near_contract_builder.domain.models.build_outcome import CompilerDiagnostic, Position, Range, Severity
from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage

logger = logging.getLogger(__name__)

_SEVERITIES = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
}

# Checked in order, first match wins.
DOCUMENTATION_LINKS: List[Dict[str, str]] = [
    {
        "keyword": "near_sdk",
        "url": "https://docs.rs/near-sdk/latest/near_sdk/",
    },
    {
        "keyword": "wasm",
        "url": "https://docs.near.org/sdk/rust/quickstart",
    },
]

DEFAULT_DOCUMENTED_CODE = "near"


def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _to_position(line: int, column: int) -> Position:
    """Cargo spans are 1-based; positions are 0-based and never negative."""
    return Position(max(0, line - 1), max(0, column - 1))


def documentation_for(text: str) -> Optional[Dict[str, str]]:
    """Returns the first documentation entry whose keyword occurs in `text`, ignoring case."""
    lowered = text.lower()
    for entry in DOCUMENTATION_LINKS:
        if entry["keyword"] in lowered:
            return entry
    return None


class DiagnosticExtractor:
    """
    Extracts diagnostics from error and warning compiler messages.

    Only primary spans produce diagnostics; secondary spans ("defined here" and
    similar) are dropped. Notes, help and other levels are ignored.
    """

    def extract(self, message: RawMessage) -> List[CompilerDiagnostic]:
        """
        Args:
            message: A decoded cargo message. Anything other than a
                compiler-message yields no diagnostics.

        Returns:
            Diagnostics in span order.
        """
        if message.kind is not MessageKind.COMPILER_DIAGNOSTIC:
            return []

        body = message.payload.get("message")
        if not isinstance(body, dict):
            return []

        spans = body.get("spans")
        if not isinstance(spans, list) or not spans:
            return []

        severity = _SEVERITIES.get(body.get("level"))
        if severity is None:
            return []

        text = self._display_text(body)
        code, url = self._documentation(body, text)

        diagnostics = []
        for span in spans:
            if not isinstance(span, dict):
                continue
            if span.get("is_primary") is False:
                continue
            file_path = span.get("file_name")
            if not isinstance(file_path, str) or not file_path:
                continue

            diagnostics.append(CompilerDiagnostic(
                file_path=file_path,
                range=self._span_range(span),
                severity=severity,
                message=text,
                code=code,
                documentation_url=url,
            ))

        if diagnostics:
            logger.debug(f"Extracted {len(diagnostics)} {severity.value} diagnostic(s) from compiler message")
        return diagnostics

    def _span_range(self, span: Dict[str, Any]) -> Range:
        line_start = _as_int(span.get("line_start")) or 1
        column_start = _as_int(span.get("column_start")) or 1
        line_end = _as_int(span.get("line_end")) or line_start
        column_end = _as_int(span.get("column_end")) or column_start

        start = _to_position(line_start, column_start)
        end = _to_position(line_end, column_end)
        if end.as_tuple() < start.as_tuple():
            logger.debug(f"Clamping inverted span {span.get('file_name')}: {start} > {end}")
            end = start
        return Range(start=start, end=end)

    def _display_text(self, body: Dict[str, Any]) -> str:
        for key in ("rendered", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        return ""

    def _documentation(self, body: Dict[str, Any], text: str):
        entry = documentation_for(text)
        if entry is None:
            return None, None
        code_info = body.get("code")
        code = code_info.get("code") if isinstance(code_info, dict) else None
        return (code or DEFAULT_DOCUMENTED_CODE), entry["url"]
