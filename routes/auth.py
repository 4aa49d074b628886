import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from auth import authenticate, create_user
from schemas.auth import UserCreate, LoginRequest, SessionResponse, UserResponse
from sessions import create_session, destroy_session, resolve_session
from utils.route_helpers import (
    clear_session_cookie, get_session_token, require_user, set_session_cookie, user_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

def start_session(response: Response, user_id: int) -> SessionResponse:
    token, expires_at = create_session(user_id)
    set_session_cookie(response, token, expires_at)
    return SessionResponse(user=UserResponse(**user_response(resolve_session(token))), expires_at=expires_at)

@router.post("/register", status_code=201, response_model=SessionResponse)
def register(user: UserCreate, response: Response):
    # ConflictError propagates before any session exists
    user_id = create_user(user.email, user.username, user.password)
    return start_session(response, user_id)

@router.post("/login", response_model=SessionResponse)
def login(login_data: LoginRequest, response: Response):
    user = authenticate(login_data.email.strip(), login_data.password.strip())
    if not user:
        raise HTTPException(status_code=401, detail="Incorrect email or password")
    return start_session(response, user["id"])

@router.post("/logout")
def logout(request: Request, response: Response):
    destroy_session(get_session_token(request))
    clear_session_cookie(response)
    return {"msg": "Logged out"}

@router.get("/me", response_model=UserResponse)
def get_me(user: dict = Depends(require_user)):
    return user_response(user)
