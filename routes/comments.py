from typing import Optional

from fastapi import APIRouter, Depends

from errors import NotFoundError
from posts import add_comment, comment_exists, get_comment
from reactions import apply_reaction, reaction_counts, viewer_reaction
from schemas.posts import CommentCreate, CommentLikeRequest, CommentResponse, ReactionResponse
from utils.route_helpers import get_current_user, require_user

router = APIRouter(prefix="/comments", tags=["comments"])

@router.post("", status_code=201, response_model=CommentResponse)
def create_comment(comment: CommentCreate, user: dict = Depends(require_user)):
    comment_id = add_comment(user["id"], comment.post_id, comment.content)
    return get_comment(comment_id, user["id"])

@router.post("/{comment_id}/like", response_model=ReactionResponse)
def like_comment(comment_id: int, req: CommentLikeRequest, user: dict = Depends(require_user)):
    value = apply_reaction(user["id"], "comment", comment_id, req.value)
    likes, dislikes = reaction_counts("comment", comment_id)
    return ReactionResponse(kind="comment", id=comment_id, value=value, likes=likes, dislikes=dislikes)

@router.get("/{comment_id}/like-status", response_model=ReactionResponse)
def get_comment_like_status(comment_id: int, viewer: Optional[dict] = Depends(get_current_user)):
    """Current viewer's reaction for a comment, with the derived counts"""
    if not comment_exists(comment_id):
        raise NotFoundError("Comment", comment_id)
    likes, dislikes = reaction_counts("comment", comment_id)
    value = viewer_reaction(viewer["id"] if viewer else None, "comment", comment_id)
    return ReactionResponse(kind="comment", id=comment_id, value=value, likes=likes, dislikes=dislikes)
