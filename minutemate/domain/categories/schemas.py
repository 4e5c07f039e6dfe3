"""Category schemas"""

from pydantic import BaseModel


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str
    subcategories: list[str] = []
