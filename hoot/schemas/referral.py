from pydantic import BaseModel, Field


class ReferralValidationResponse(BaseModel):
    valid: bool
    code: str | None = None


class ReferralCodeCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    description: str | None = Field(None, max_length=500)
