from pydantic import BaseModel, field_validator

from secure_finance.models.common import to_hex

# ===== COLOUR PYDANTIC MODELS =====

class ColourResponse(BaseModel):
    id: int
    name: str
    code: str

    @field_validator('code', mode='before')
    @classmethod
    def encode_code(cls, v):
        return to_hex(v)

    class Config:
        from_attributes = True
