from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from post_filters import build_filters, list_posts
from errors import NotFoundError
from posts import create_post, get_post_detail, list_categories, post_exists
from reactions import apply_reaction, reaction_counts, viewer_reaction
from schemas.posts import (
    CategoryResponse, PostCreate, PostLikeRequest, PostListItem, PostResponse, ReactionResponse,
)
from utils.route_helpers import get_current_user, require_user

router = APIRouter(prefix="/posts", tags=["posts"])

@router.get("", response_model=List[PostListItem])
def list_post_feed(
    cat: Optional[str] = Query(None),
    mine: Optional[str] = Query(None),
    liked: Optional[str] = Query(None),
    viewer: Optional[dict] = Depends(get_current_user),
):
    """Up to 100 posts, newest first, narrowed by category / own posts / liked by me"""
    filters = build_filters(viewer, category=cat, mine=mine == "1", liked=liked == "1")
    return list_posts(filters)

@router.post("", status_code=201, response_model=PostResponse)
def new_post(post: PostCreate, user: dict = Depends(require_user)):
    post_id = create_post(user["id"], post.title, post.content, post.categories)
    return get_post_detail(post_id, user["id"])

@router.get("/categories", response_model=List[CategoryResponse])
def get_categories():
    return list_categories()

@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, viewer: Optional[dict] = Depends(get_current_user)):
    return get_post_detail(post_id, viewer["id"] if viewer else None)

@router.post("/{post_id}/like", response_model=ReactionResponse)
def like_post(post_id: int, req: PostLikeRequest, user: dict = Depends(require_user)):
    value = apply_reaction(user["id"], "post", post_id, req.value)
    likes, dislikes = reaction_counts("post", post_id)
    return ReactionResponse(kind="post", id=post_id, value=value, likes=likes, dislikes=dislikes)

@router.get("/{post_id}/like-status", response_model=ReactionResponse)
def get_post_like_status(post_id: int, viewer: Optional[dict] = Depends(get_current_user)):
    """Current viewer's reaction for a post, with the derived counts"""
    if not post_exists(post_id):
        raise NotFoundError("Post", post_id)
    likes, dislikes = reaction_counts("post", post_id)
    value = viewer_reaction(viewer["id"] if viewer else None, "post", post_id)
    return ReactionResponse(kind="post", id=post_id, value=value, likes=likes, dislikes=dislikes)
