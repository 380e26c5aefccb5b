from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreatePostRequest(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    is_published: bool = True


class PostInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    title: str
    content: str
    is_published: bool
    created_at: str
    updated_at: str
    author_name: Optional[str] = None


class PostListResponse(BaseModel):
    posts: List[PostInfo]
