"""Style templates router: the built-in visual templates for elements."""
from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException

from ..models.interaction import StyleTemplate
from ..services.style_templates import get_template, list_templates

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get("", response_model=List[StyleTemplate])
async def get_templates():
    return list_templates()


@router.get("/{template_id}", response_model=StyleTemplate)
async def get_template_by_id(template_id: str):
    try:
        return get_template(template_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Template not found")
