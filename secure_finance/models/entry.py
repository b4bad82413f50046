from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from secure_finance.models.common import to_base64


# ===== ENTRY PYDANTIC MODELS =====
# Every payload field is encrypted on the client and sent as Base64. Amounts and
# timestamps included: the server never computes on them.

class EntryCreate(BaseModel):
    name: Optional[str] = Field(None, description="Encrypted entry name (Base64)")
    description: Optional[str] = Field(None, description="Encrypted entry description (Base64)")
    amount: str = Field(..., min_length=1, description="Encrypted amount (Base64)")
    time_of_expense: str = Field(..., min_length=1, description="Encrypted time of the expense (Base64)")
    attachment: Optional[str] = Field(None, description="Encrypted attachment (Base64)")


class EntryBulkItem(EntryCreate):
    mobile_id: Optional[int] = Field(None, gt=0, description="Client-side id echoed back in the response")


class EntryUpdate(EntryCreate):
    """Whole-record replacement; creation_time is never rewritten"""
    subcategory_id: int = Field(..., gt=0, description="ID of the (new) parent subcategory")


class EntryPatch(BaseModel):
    """Update entry - all fields optional"""
    subcategory_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = Field(None, min_length=1)
    time_of_expense: Optional[str] = Field(None, min_length=1)
    attachment: Optional[str] = None


class EntryResponse(BaseModel):
    """Entry data returned to client"""
    id: int
    subcategory_id: int
    name: Optional[str]
    description: Optional[str]
    amount: str
    creation_time: str
    time_of_expense: str
    attachment: Optional[str]
    user_id: int

    @field_validator('name', 'description', 'amount', 'creation_time', 'time_of_expense', 'attachment', mode='before')
    @classmethod
    def encode_payload(cls, v):
        return to_base64(v)

    class Config:
        from_attributes = True


class EntryBulkResponse(EntryResponse):
    mobile_id: Optional[int] = None


class EntryBatchPatch(BaseModel):
    """Partial updates for several entries. Position n addresses entry_ids[n] in subcategory_ids[n]"""
    subcategory_ids: List[int]
    entry_ids: List[int]
    updates: List[EntryPatch]
