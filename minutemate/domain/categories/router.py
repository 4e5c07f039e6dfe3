"""Category router - public expertise catalogue"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from .catalog import EXPERTISE_CATEGORIES, get_category, search_categories
from .schemas import CategoryResponse

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(q: Optional[str] = Query(None, max_length=100)):
    """List expertise categories, optionally filtered by a search term"""
    if q:
        return search_categories(q)
    return EXPERTISE_CATEGORIES


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category_by_id(category_id: str):
    category = get_category(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
