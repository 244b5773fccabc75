"""
Theme API routes
The toggle button and chat directives write through the same ThemeStore
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.api.deps import get_visitor_id
from storefront.models.theme import Theme
from storefront.services.theme_store import ThemeRegistry, get_theme_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/theme", tags=["theme"])


class ThemeResponse(BaseModel):
    theme: Theme


@router.get("", response_model=ThemeResponse)
async def get_theme(
    visitor_id: str = Depends(get_visitor_id),
    registry: ThemeRegistry = Depends(get_theme_registry)
):
    return ThemeResponse(theme=registry.get(visitor_id).theme)


@router.post("/toggle", response_model=ThemeResponse)
async def toggle_theme(
    visitor_id: str = Depends(get_visitor_id),
    registry: ThemeRegistry = Depends(get_theme_registry)
):
    theme = registry.get(visitor_id).toggle()
    logger.info(f"Visitor {visitor_id} toggled theme to {theme.value}")
    return ThemeResponse(theme=theme)
