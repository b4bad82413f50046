from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from secure_finance.models.common import to_base64

# ===== SUBCATEGORY PYDANTIC MODELS =====

class SubcategoryBase(BaseModel):
    name: str = Field(..., min_length=1, description="Encrypted subcategory name (Base64)")
    description: Optional[str] = Field(None, description="Encrypted subcategory description (Base64)")
    colour_id: int = Field(..., gt=0, description="ID of the palette colour")

class SubcategoryCreate(SubcategoryBase):
    pass

class SubcategoryUpdate(SubcategoryBase):
    """Whole-record replacement, may move the subcategory to another category"""
    category_id: int = Field(..., gt=0, description="ID of the (new) parent category")

class SubcategoryPatch(BaseModel):
    category_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    colour_id: Optional[int] = Field(None, gt=0)

class SubcategoryResponse(BaseModel):
    id: int
    category_id: int
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

class SubcategoryBatchPatch(BaseModel):
    """Partial updates for several subcategories. Position n addresses subcategory_ids[n] in category_ids[n]"""
    category_ids: List[int]
    subcategory_ids: List[int]
    updates: List[SubcategoryPatch]
