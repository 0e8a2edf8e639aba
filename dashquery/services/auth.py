from pydantic import BaseModel, Field


class SignedInUser(BaseModel):
    """Identity of the caller, resolved upstream before any service call."""
    user_id: int = Field(..., gt=0)
    org_id: int = Field(..., gt=0)
    login: str = ""
