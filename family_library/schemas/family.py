from pydantic import BaseModel, Field


class FamilyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class Family(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserFamilyCreate(BaseModel):
    user_id: int = Field(..., ge=1)
    family_id: int = Field(..., ge=1)


class UserFamily(BaseModel):
    """One user's membership in one family."""

    id: int
    user_id: int
    family_id: int

    class Config:
        from_attributes = True
