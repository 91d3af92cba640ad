"""Built-in visual templates for interactive elements.

In-memory catalogue; the editor copies a template's style, option style
and (optionally) position onto the selected element.
"""
from typing import Dict, List

from ..models.interaction import (
    InteractionOptionStyle,
    InteractionStyle,
    Position,
    StyleTemplate,
)

STYLE_TEMPLATES: List[StyleTemplate] = [
    StyleTemplate(
        id="classic",
        name="Classic",
        description="White card with dark text, centered",
        style=InteractionStyle(
            backgroundColor="#ffffff",
            textColor="#111827",
            borderColor="#e5e7eb",
            borderRadius="8px",
            fontSize="16px",
            padding="16px",
            opacity="1",
        ),
        optionStyle=InteractionOptionStyle(
            backgroundColor="#f3f4f6",
            textColor="#111827",
            borderColor="#d1d5db",
            borderRadius="6px",
            hoverColor="#e5e7eb",
        ),
        position=Position(x=50, y=50),
    ),
    StyleTemplate(
        id="dark-overlay",
        name="Dark Overlay",
        description="Translucent dark panel that keeps the video visible",
        style=InteractionStyle(
            backgroundColor="#000000",
            textColor="#f9fafb",
            borderColor="#374151",
            borderRadius="12px",
            fontSize="16px",
            padding="20px",
            opacity="0.85",
        ),
        optionStyle=InteractionOptionStyle(
            backgroundColor="#1f2937",
            textColor="#f9fafb",
            borderColor="#4b5563",
            borderRadius="8px",
            hoverColor="#374151",
        ),
    ),
    StyleTemplate(
        id="lower-third",
        name="Lower Third",
        description="Compact bar near the bottom of the frame",
        style=InteractionStyle(
            backgroundColor="#1d4ed8",
            textColor="#ffffff",
            borderColor="#1e40af",
            borderRadius="4px",
            fontSize="14px",
            padding="10px",
            opacity="0.95",
        ),
        optionStyle=InteractionOptionStyle(
            backgroundColor="#2563eb",
            textColor="#ffffff",
            borderColor="#1e3a8a",
            borderRadius="4px",
            hoverColor="#3b82f6",
        ),
        position=Position(x=50, y=85),
    ),
]

_BY_ID: Dict[str, StyleTemplate] = {t.id: t for t in STYLE_TEMPLATES}


def list_templates() -> List[StyleTemplate]:
    return list(STYLE_TEMPLATES)


def get_template(template_id: str) -> StyleTemplate:
    try:
        return _BY_ID[template_id]
    except KeyError:
        raise KeyError(f"Unknown style template: {template_id}") from None
