"""Authoring state for the creator-side editor.

Mutations never edit the current list in place: each one builds a new tuple
and swaps it in with a single assignment, so a scheduler pass that already
took ``elements`` keeps a consistent view.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models.interaction import (
    ElementListSnapshot,
    ElementOption,
    ElementType,
    InteractionSettings,
    InteractiveElement,
    Position,
    StyleTemplate,
)
from .errors import ElementNotFound, NoSelection

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 15.0

ElementInput = Union[InteractiveElement, Dict[str, Any]]


def new_element_id(prefix: str = "element") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def default_options(element_type: ElementType) -> List[ElementOption]:
    """Starter options for a freshly added element."""
    if element_type == ElementType.QUIZ:
        return [
            ElementOption(id=new_element_id("option"), text="Option 1", isCorrect=True),
            ElementOption(id=new_element_id("option"), text="Option 2", isCorrect=False),
        ]
    if element_type == ElementType.POLL:
        return [
            ElementOption(id=new_element_id("option"), text="Option 1"),
            ElementOption(id=new_element_id("option"), text="Option 2"),
        ]
    if element_type == ElementType.DECISION:
        return [
            ElementOption(id=new_element_id("option"), text="Option 1", action="jump:30"),
            ElementOption(id=new_element_id("option"), text="Option 2", action="jump:60"),
        ]
    return [ElementOption(id=new_element_id("option"), text="Click me", action="jump:30")]


class EditorState:
    def __init__(
        self,
        elements: Iterable[ElementInput] = (),
        settings: Optional[InteractionSettings] = None,
        video_id: Optional[str] = None,
        title: Optional[str] = None,
    ):
        self._elements: Tuple[InteractiveElement, ...] = tuple(
            self._coerce(e) for e in elements
        )
        self.settings = settings or InteractionSettings()
        self.video_id = video_id
        self.title = title
        self.selected_id: Optional[str] = None

    @staticmethod
    def _coerce(element: ElementInput) -> InteractiveElement:
        if isinstance(element, InteractiveElement):
            return element.model_copy(deep=True)
        return InteractiveElement.model_validate(element)

    @property
    def elements(self) -> Tuple[InteractiveElement, ...]:
        return self._elements

    @property
    def selected(self) -> Optional[InteractiveElement]:
        if self.selected_id is None:
            return None
        return self.get(self.selected_id)

    def get(self, element_id: str) -> InteractiveElement:
        for element in self._elements:
            if element.id == element_id:
                return element
        raise ElementNotFound(element_id)

    def select(self, element_id: Optional[str]) -> None:
        if element_id is not None:
            self.get(element_id)
        self.selected_id = element_id

    # CRUD -------------------------------------------------------------------
    def add(
        self,
        element_type: ElementType,
        at_time: float = 0.0,
        **overrides: Any,
    ) -> InteractiveElement:
        """Add a new element at the playhead and select it."""
        element_type = ElementType(element_type)
        data: Dict[str, Any] = {
            "id": new_element_id(),
            "type": element_type,
            "title": f"New {element_type.value.capitalize()}",
            "description": "",
            "timestamp": max(0.0, float(at_time)),
            "duration": DEFAULT_DURATION,
            "position": Position(x=50, y=50),
            "options": default_options(element_type),
            "style": self.settings.defaultStyle,
            "optionStyle": self.settings.defaultOptionStyle,
        }
        data.update(overrides)
        element = InteractiveElement.model_validate(data)
        self._elements = self._elements + (element,)
        self.selected_id = element.id
        logger.info("Added %s element %s at %.1fs", element_type.value, element.id, element.timestamp)
        return element

    def update(self, element: ElementInput) -> InteractiveElement:
        """Replace the element with the same id (first match)."""
        replacement = self._coerce(element)
        updated: List[InteractiveElement] = []
        replaced = False
        for current in self._elements:
            if not replaced and current.id == replacement.id:
                updated.append(replacement)
                replaced = True
            else:
                updated.append(current)
        if not replaced:
            raise ElementNotFound(replacement.id)
        self._elements = tuple(updated)
        return replacement

    def delete(self, element_id: str) -> None:
        remaining = tuple(e for e in self._elements if e.id != element_id)
        if len(remaining) == len(self._elements):
            raise ElementNotFound(element_id)
        self._elements = remaining
        if self.selected_id == element_id:
            self.selected_id = None

    def apply_template(
        self, template: StyleTemplate, element_id: Optional[str] = None
    ) -> InteractiveElement:
        """Copy a template's style, option style and position onto an element."""
        target_id = element_id or self.selected_id
        if target_id is None:
            raise NoSelection("Select an element before applying a template")
        element = self.get(target_id)
        changes: Dict[str, Any] = {
            "style": template.style.model_copy(),
            "optionStyle": template.optionStyle.model_copy(),
        }
        if template.position is not None:
            changes["position"] = template.position.model_copy()
        return self.update(element.model_copy(update=changes))

    # Import / export --------------------------------------------------------
    def import_elements(self, imported: Sequence[ElementInput]) -> List[InteractiveElement]:
        """Append decoded elements under fresh ids."""
        created = []
        for item in imported:
            data = item.model_dump() if isinstance(item, InteractiveElement) else dict(item)
            data["id"] = new_element_id("imported")
            created.append(InteractiveElement.model_validate(data))
        self._elements = self._elements + tuple(created)
        logger.info("Imported %d elements", len(created))
        return created

    def export_snapshot(self) -> ElementListSnapshot:
        return ElementListSnapshot(
            videoId=self.video_id,
            title=self.title,
            elements=[e.model_copy(deep=True) for e in self._elements],
            settings=self.settings.model_copy(deep=True),
        )
