from typing import List, Optional

from pydantic import BaseModel, Field


class CreateClassRequest(BaseModel):
    name: str = Field(min_length=1)
    grade: str = Field(min_length=1)


class ClassMemberInfo(BaseModel):
    user_id: str
    full_name: str
    email: str
    role: Optional[str] = None


class ClassInfo(BaseModel):
    id: str
    name: str
    grade: str
    created_by: str
    created_at: str
    updated_at: str
    members: List[ClassMemberInfo] = []


class AddMemberRequest(BaseModel):
    user_id: str


class AssignChildRequest(BaseModel):
    child_id: str
