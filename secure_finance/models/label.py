from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from secure_finance.models.common import to_base64

# ===== LABEL PYDANTIC MODELS =====

class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Encrypted label name (Base64)")
    description: Optional[str] = Field(None, description="Encrypted label description (Base64)")
    colour_id: int = Field(..., gt=0, description="ID of the palette colour")


class LabelBulkItem(LabelCreate):
    mobile_id: Optional[int] = Field(None, gt=0)


class LabelUpdate(LabelCreate):
    """Whole-record replacement"""
    pass


class LabelPatch(BaseModel):
    """Update label - all fields optional"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    colour_id: Optional[int] = Field(None, gt=0)


class LabelResponse(BaseModel):
    """Label data returned to client"""
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


class LabelBulkResponse(LabelResponse):
    mobile_id: Optional[int] = None


class EntryLabelResponse(BaseModel):
    """Entry-Label relationship response"""
    id: int
    entry_id: int
    label_id: int
    user_id: int

    class Config:
        from_attributes = True


class LabelBatchPatch(BaseModel):
    """Partial updates for several labels, matched to label_ids by position"""
    label_ids: List[int] = Field(..., description="IDs of the labels to update")
    updates: List[LabelPatch] = Field(..., description="One update per label id, in the same order")


class EntryLabelBatch(BaseModel):
    """Pairs of entry and label ids; the n-th label belongs to the n-th entry"""
    entry_ids: List[int]
    label_ids: List[int]
