"""
Element list encoders/decoders

JSON is the canonical shape (an ``ElementListSnapshot`` or a bare list of
elements). CSV flattens one element per row; nested fields (options,
position, style, optionStyle, feedback) are stored as JSON strings in their
cells.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..models.interaction import ElementListSnapshot
from ..utils.validation import validate_import_document

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "id",
    "type",
    "title",
    "description",
    "timestamp",
    "duration",
    "pauseVideo",
    "options",
    "position",
    "style",
    "optionStyle",
    "feedback",
]
_JSON_COLUMNS = {"options", "position", "style", "optionStyle", "feedback"}
_FLOAT_COLUMNS = {"timestamp", "duration"}


class UnsupportedFormatError(ValueError):
    """Raised for a format name without a registered codec."""


class DecodeError(ValueError):
    """Raised when a payload cannot be turned into element dictionaries."""


@dataclass(frozen=True)
class ElementCodec:
    name: str
    media_type: str
    file_extension: str
    encode: Callable[[ElementListSnapshot], str]
    decode: Callable[[str], List[Dict[str, Any]]]


# JSON ----------------------------------------------------------------------
def encode_json(snapshot: ElementListSnapshot) -> str:
    return json.dumps(snapshot.model_dump(mode="json"), indent=2, ensure_ascii=False)


def decode_json(payload: str) -> List[Dict[str, Any]]:
    try:
        document = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e
    errors = validate_import_document(document)
    if errors:
        raise DecodeError("; ".join(errors))
    if isinstance(document, dict):
        return list(document["elements"])
    return list(document)


# CSV -----------------------------------------------------------------------
def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_csv(snapshot: ElementListSnapshot) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for element in snapshot.elements:
        data = element.model_dump(mode="json")
        writer.writerow([_cell(data.get(column)) for column in CSV_COLUMNS])
    return buffer.getvalue()


def _parse_row(row: Dict[str, str]) -> Dict[str, Any]:
    element: Dict[str, Any] = {}
    for column in CSV_COLUMNS:
        raw = (row.get(column) or "").strip()
        if raw == "":
            continue
        if column in _JSON_COLUMNS:
            element[column] = json.loads(raw)
        elif column in _FLOAT_COLUMNS:
            element[column] = float(raw)
        elif column == "pauseVideo":
            element[column] = raw.lower() in ("true", "1", "yes")
        else:
            element[column] = raw
    return element


def decode_csv(payload: str) -> List[Dict[str, Any]]:
    if not payload.strip():
        return []
    reader = csv.DictReader(io.StringIO(payload))
    missing = {"type", "timestamp", "duration"} - set(reader.fieldnames or [])
    if missing:
        raise DecodeError(f"CSV is missing required columns: {', '.join(sorted(missing))}")

    elements = []
    for line_number, row in enumerate(reader, start=2):
        if not any((value or "").strip() for key, value in row.items() if key is not None):
            continue
        if None in row or any(value is None for value in row.values()):
            raise DecodeError(f"CSV row {line_number}: wrong number of values")
        try:
            elements.append(_parse_row(row))
        except ValueError as e:
            raise DecodeError(f"CSV row {line_number}: {e}") from e
    logger.debug("Decoded %d CSV rows", len(elements))
    return elements


CODECS: Dict[str, ElementCodec] = {
    "json": ElementCodec("json", "application/json", ".json", encode_json, decode_json),
    "csv": ElementCodec("csv", "text/csv", ".csv", encode_csv, decode_csv),
}


def get_codec(name: str) -> ElementCodec:
    try:
        return CODECS[name.lower()]
    except KeyError:
        raise UnsupportedFormatError(
            f"Unsupported format '{name}'. Supported: {', '.join(sorted(CODECS))}"
        ) from None
