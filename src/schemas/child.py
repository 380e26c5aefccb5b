from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateChildRequest(BaseModel):
    name: str = Field(min_length=1)
    date_of_birth: str = Field(description="YYYY-MM-DD")
    favorite_animal: str = Field(min_length=1)
    grade: Optional[str] = None


class UpdateChildRequest(BaseModel):
    name: Optional[str] = None
    date_of_birth: Optional[str] = None
    favorite_animal: Optional[str] = None
    grade: Optional[str] = None


class LinkParentRequest(BaseModel):
    parent_email: str


class ChildInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    date_of_birth: str
    favorite_animal: str
    grade: Optional[str] = None
    parent_id: Optional[str] = None
    created_at: str
    parent_name: Optional[str] = None


class ChildListResponse(BaseModel):
    children: List[ChildInfo]
