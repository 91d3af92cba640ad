"""
Element list validation utilities

Structural checks for imported documents (JSON Schema) and business-rule
checks for element lists that are valid models but probably not what the
creator intended.
"""

from typing import Any, Dict, List, Optional, Sequence

from jsonschema import Draft7Validator
import logging

from ..engine.responses import parse_jump_action
from ..models.interaction import ElementType, InteractiveElement

logger = logging.getLogger(__name__)

_ELEMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "type": {"enum": [t.value for t in ElementType]},
        "title": {"type": "string"},
        "timestamp": {"type": "number", "minimum": 0},
        "duration": {"type": "number", "exclusiveMinimum": 0},
        "options": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "isCorrect": {"type": ["boolean", "null"]},
                    "action": {"type": ["string", "null"]},
                },
                "required": ["text"],
            },
        },
    },
    "required": ["type", "timestamp", "duration"],
}

IMPORT_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "oneOf": [
        {"type": "array", "items": _ELEMENT_SCHEMA},
        {
            "type": "object",
            "properties": {"elements": {"type": "array", "items": _ELEMENT_SCHEMA}},
            "required": ["elements"],
        },
    ],
}

_validator = Draft7Validator(IMPORT_DOCUMENT_SCHEMA)


def validate_import_document(document: Any) -> List[str]:
    """Return human readable schema violations (empty when valid)."""
    errors = []
    for error in sorted(_validator.iter_errors(document), key=lambda e: list(e.absolute_path)):
        path = ".".join(str(p) for p in error.absolute_path) or "document"
        errors.append(f"{path}: {error.message}")
    return errors


class ValidationIssue:
    """Validation finding structure"""
    def __init__(self, field: str, message: str, level: str = "warning"):
        self.field = field
        self.message = message
        self.level = level

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "level": self.level}


def validate_element_list(
    elements: Sequence[InteractiveElement],
    video_duration: Optional[float] = None,
) -> List[ValidationIssue]:
    """Business rules: duplicate ids, quizzes without an answer, bad actions,
    windows past the end of the video and overlapping pausing elements."""
    issues: List[ValidationIssue] = []
    seen = set()

    for index, element in enumerate(elements):
        field = f"elements[{index}]"
        if element.id in seen:
            issues.append(ValidationIssue(
                f"{field}.id", f"Duplicate id '{element.id}'; only the first is scheduled", "error"
            ))
        seen.add(element.id)

        if element.type == ElementType.QUIZ and element.correct_option_index() is None:
            issues.append(ValidationIssue(f"{field}.options", "Quiz has no correct option"))

        if element.type == ElementType.DECISION:
            for option_index, option in enumerate(element.options):
                if option.action and parse_jump_action(option.action) is None:
                    issues.append(ValidationIssue(
                        f"{field}.options[{option_index}].action",
                        f"Unrecognised action '{option.action}'",
                    ))

        if video_duration is not None and element.timestamp >= video_duration:
            issues.append(ValidationIssue(
                f"{field}.timestamp", "Element starts after the end of the video"
            ))

    ordered = sorted(elements, key=lambda e: e.timestamp)
    for first, second in zip(ordered, ordered[1:]):
        if second.timestamp < first.end and first.pauseVideo and second.pauseVideo:
            issues.append(ValidationIssue(
                "elements",
                f"Elements '{first.id}' and '{second.id}' overlap and both pause playback",
                "info",
            ))

    return issues


async def get_validation_status() -> Dict[str, Any]:
    """Health-check dependency: confirm the import schema is usable"""
    try:
        Draft7Validator.check_schema(IMPORT_DOCUMENT_SCHEMA)
        probe = validate_import_document([{"type": "hotspot", "timestamp": 0, "duration": 1}])
        return {"schema_loaded": True, "validation_working": not probe}
    except Exception as e:
        logger.error(f"Validation self-check failed: {e}")
        return {"schema_loaded": False, "validation_working": False, "error": str(e)}
