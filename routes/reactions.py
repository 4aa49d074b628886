from fastapi import APIRouter, Depends, Form

from reactions import apply_reaction, reaction_counts
from schemas.posts import ReactionResponse
from utils.route_helpers import require_user

router = APIRouter(tags=["reactions"])

@router.post("/react", response_model=ReactionResponse)
def react(
    kind: str = Form(...),
    id: int = Form(...),
    v: int = Form(...),
    user: dict = Depends(require_user),
):
    """Form-style toggle: kind=post|comment, id, v=1|-1"""
    value = apply_reaction(user["id"], kind, id, v)
    likes, dislikes = reaction_counts(kind, id)
    return ReactionResponse(kind=kind, id=id, value=value, likes=likes, dislikes=dislikes)
