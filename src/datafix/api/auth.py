# src/datafix/api/auth.py
"""
Authentication routes for the DataFix API.

Handles email/password login against Supabase Auth, logout, and the current
session.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..auth.middleware import SESSION_COOKIE
from ..auth.session import SessionHolder, UserSession
from .deps import get_current_session
from .responses import APIException, ErrorCode, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

SESSION_MAX_AGE = 60 * 60  # Supabase access tokens expire after one hour


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
def login(body: LoginRequest):
    """Sign in with email and password; returns the access token and session."""
    from ..infrastructure.supabase_client import create_supabase_client

    # A fresh client per sign-in keeps the shared client's auth state untouched.
    with SessionHolder(create_supabase_client()) as holder:
        result = holder.sign_in(body.email, body.password)

    if not result.ok:
        raise APIException(ErrorCode.AUTH_INVALID, "Invalid email or password", detail=result.error)

    session = result.session
    logger.info(f"User {session.user_id} signed in")
    response = JSONResponse(success_response({
        "access_token": session.access_token,
        "session": session.to_dict(),
    }))
    if session.access_token:
        response.set_cookie(
            key=SESSION_COOKIE,
            value=session.access_token,
            httponly=True,
            max_age=SESSION_MAX_AGE,
            samesite="lax",
        )
    return response


@router.post("/logout")
def logout(session: UserSession = Depends(get_current_session)):
    """Forget the session cookie."""
    logger.info(f"User {session.user_id} signed out")
    response = JSONResponse(success_response({"signed_out": True}))
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me")
def me(session: UserSession = Depends(get_current_session)):
    """Current user, profile and permissions."""
    return success_response(session.to_dict())
