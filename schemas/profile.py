from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, field_validator

class ProfileUpdate(BaseModel):
    display_name: str
    bio: str = ""

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        v = v.strip()
        if not v or len(v) > 50:
            raise ValueError('Display name must be 1-50 characters long')
        return v

    @field_validator('bio')
    @classmethod
    def validate_bio(cls, v):
        v = v.strip()
        if len(v) > 280:
            raise ValueError('Bio must be at most 280 characters long')
        return v

class ProfileCounts(BaseModel):
    posts: int
    comments: int
    likes_received: int

class ProfileResponse(BaseModel):
    user_id: int
    username: str
    display_name: str
    bio: str
    avatar_url: Optional[str]
    created_at: datetime
    counts: ProfileCounts
    is_owner: bool

class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool
    prev_url: Optional[str] = None
    next_url: Optional[str] = None

class ProfilePostItem(BaseModel):
    id: int
    title: str
    created_at: datetime
    comment_count: int

class ProfileCommentItem(BaseModel):
    id: int
    post_id: int
    post_title: str
    content: str
    created_at: datetime

class ProfilePostsPage(BaseModel):
    items: List[ProfilePostItem]
    meta: PageMeta

class ProfileCommentsPage(BaseModel):
    items: List[ProfileCommentItem]
    meta: PageMeta

class AvatarResponse(BaseModel):
    message: str
    avatar_url: str

class CsrfTokenResponse(BaseModel):
    csrf_token: str
