from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from auth import create_csrf_token
from file_utils import ingest_avatar
from profiles import (
    list_user_comments, list_user_posts, load_profile, normalize_page, page_meta,
    profile_counts, update_profile,
)
from schemas.profile import (
    AvatarResponse, CsrfTokenResponse, PageMeta, ProfileCommentsPage, ProfilePostsPage,
    ProfileResponse, ProfileUpdate,
)
from schemas.auth import UserResponse
from sessions import resolve_session
from utils.route_helpers import (
    get_current_user, get_session_token, require_csrf, require_user, user_response,
)

router = APIRouter(prefix="/users", tags=["profiles"])

def build_page_meta(username: str, tab: str, page: int, limit: int, total: int) -> PageMeta:
    meta = PageMeta(**page_meta(page, limit, total))
    if meta.has_prev:
        meta.prev_url = f"/users/{username}/{tab}?page={page - 1}&limit={limit}"
    if meta.has_next:
        meta.next_url = f"/users/{username}/{tab}?page={page + 1}&limit={limit}"
    return meta

@router.get("/me/csrf", response_model=CsrfTokenResponse)
def get_csrf_token(request: Request, user: dict = Depends(require_user)):
    """Issue a CSRF token bound to the caller's session"""
    return CsrfTokenResponse(csrf_token=create_csrf_token(get_session_token(request)))

@router.put("/me/settings", response_model=UserResponse)
def update_settings(settings: ProfileUpdate, request: Request, user: dict = Depends(require_csrf)):
    """Update display name and bio"""
    update_profile(user["id"], settings.display_name, settings.bio)
    return user_response(resolve_session(get_session_token(request)))

@router.post("/me/avatar", response_model=AvatarResponse)
def upload_avatar(file: UploadFile = File(...), user: dict = Depends(require_csrf)):
    """Upload a JPEG or PNG avatar; stored as a 256x256 JPEG"""
    file_content = file.file.read()
    declared_size = file.size if file.size is not None else len(file_content)
    avatar_url = ingest_avatar(user["id"], file_content, declared_size)
    return AvatarResponse(message="Avatar updated successfully", avatar_url=avatar_url)

@router.get("/{username}", response_model=ProfileResponse)
def get_profile(username: str, viewer: Optional[dict] = Depends(get_current_user)):
    profile = load_profile(username)
    return ProfileResponse(
        user_id=profile["id"],
        username=profile["username"],
        display_name=profile["display_name"],
        bio=profile["bio"],
        avatar_url=profile["avatar_path"],
        created_at=profile["created_at"],
        counts=profile_counts(profile["id"]),
        is_owner=viewer is not None and viewer["id"] == profile["id"],
    )

@router.get("/{username}/posts", response_model=ProfilePostsPage)
def get_profile_posts(username: str, page: int = 1, limit: int = 10):
    """A user's posts, newest first, offset-paginated"""
    profile = load_profile(username)
    page, limit = normalize_page(page, limit)
    items, total = list_user_posts(profile["id"], page, limit)
    return ProfilePostsPage(items=items, meta=build_page_meta(profile["username"], "posts", page, limit, total))

@router.get("/{username}/comments", response_model=ProfileCommentsPage)
def get_profile_comments(username: str, page: int = 1, limit: int = 10):
    """A user's comments, newest first, offset-paginated"""
    profile = load_profile(username)
    page, limit = normalize_page(page, limit)
    items, total = list_user_comments(profile["id"], page, limit)
    return ProfileCommentsPage(items=items, meta=build_page_meta(profile["username"], "comments", page, limit, total))
