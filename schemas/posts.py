from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, field_validator

class PostCreate(BaseModel):
    title: str
    content: str
    categories: Optional[str] = None  # comma-separated names

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title cannot be empty')
        if len(v) > 200:
            raise ValueError('Title must be at most 200 characters long')
        return v

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Content cannot be empty')
        return v

class CategoryResponse(BaseModel):
    id: int
    name: str

class PostListItem(BaseModel):
    id: int
    title: str
    user_id: int
    author_username: str
    author_display_name: str
    author_avatar_path: Optional[str] = None
    created_at: datetime
    categories: str = ""

class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    author_username: str
    author_display_name: str
    author_avatar_path: Optional[str] = None
    content: str
    created_at: datetime
    likes: int = 0
    dislikes: int = 0
    viewer_reaction: Optional[int] = None

class PostResponse(BaseModel):
    id: int
    user_id: int
    author_username: str
    author_display_name: str
    author_avatar_path: Optional[str] = None
    title: str
    content: str
    created_at: datetime
    categories: List[str] = []
    likes: int = 0
    dislikes: int = 0
    viewer_reaction: Optional[int] = None
    comments: List[CommentResponse] = []

class CommentCreate(BaseModel):
    post_id: int
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Content cannot be empty')
        return v

class PostLikeRequest(BaseModel):
    value: int  # 1 for like, -1 for dislike

    @field_validator('value')
    @classmethod
    def validate_value(cls, v):
        if v not in (1, -1):
            raise ValueError('Value must be 1 (like) or -1 (dislike)')
        return v

class CommentLikeRequest(PostLikeRequest):
    pass

class ReactionResponse(BaseModel):
    kind: str
    id: int
    value: Optional[int] = None  # None once un-voted
    likes: int
    dislikes: int
