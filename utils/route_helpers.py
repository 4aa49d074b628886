import time
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response

from auth import verify_csrf_token
from config import get_settings
from sessions import resolve_session

CSRF_HEADER = "X-CSRF-Token"

def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings().session_cookie_name) or None

def get_current_user(request: Request) -> Optional[dict]:
    """Resolve the viewer from the session cookie; None for anonymous requests"""
    return resolve_session(get_session_token(request))

def require_user(user: Optional[dict] = Depends(get_current_user)) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="Login required")
    return user

def require_csrf(request: Request, user: dict = Depends(require_user)) -> dict:
    """Protected, state-changing calls must echo a CSRF token bound to the session"""
    if not verify_csrf_token(request.headers.get(CSRF_HEADER), get_session_token(request)):
        raise HTTPException(status_code=403, detail="Invalid CSRF token")
    return user

def set_session_cookie(response: Response, token: str, expires_at: int):
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max(expires_at - int(time.time()), 0),
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )

def clear_session_cookie(response: Response):
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )

def user_response(user: dict) -> dict:
    return {
        "user_id": user["id"],
        "email": user["email"],
        "username": user["username"],
        "display_name": user["display_name"] or user["username"],
        "bio": user["bio"],
        "avatar_url": user["avatar_path"] or None,
    }
