from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from secure_finance.models.common import to_base64

# ===== CATEGORY PYDANTIC MODELS =====
# name and description carry client-side encrypted payloads as Base64 text

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, description="Encrypted category name (Base64)")
    description: Optional[str] = Field(None, description="Encrypted category description (Base64)")
    colour_id: int = Field(..., gt=0, description="ID of the palette colour")

class CategoryCreate(CategoryBase):
    pass

class CategoryBulkItem(CategoryBase):
    mobile_id: Optional[int] = Field(None, gt=0, description="Client-side id echoed back in the response")

class CategoryUpdate(CategoryBase):
    """Whole-record replacement"""
    pass

class CategoryPatch(BaseModel):
    """Partial update - only the fields that are sent get written"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    colour_id: Optional[int] = Field(None, gt=0)

class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    colour_id: int
    user_id: int

    @field_validator('name', 'description', mode='before')
    @classmethod
    def encode_payload(cls, v):
        return to_base64(v)

    class Config:
        from_attributes = True

class CategoryBulkResponse(CategoryResponse):
    mobile_id: Optional[int] = None

class CategoryBatchPatch(BaseModel):
    """Partial updates for several categories, matched to category_ids by position"""
    category_ids: List[int] = Field(..., description="IDs of the categories to update")
    updates: List[CategoryPatch] = Field(..., description="One update per category id, in the same order")
