"""
api/routes/v1/auth.py -- Registration and login REST endpoints.

Routes:
  POST /api/v1/auth/register  -- create an account; 201 {user_id}
  POST /api/v1/auth/login     -- password login; 200 bearer token

Security:
  login_user() includes timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Both failure modes of login share one response (bad_credentials).
  Cache-Control: no-store on login responses so tokens are not cached.

Errors are raised as AuthError subclasses and rendered by the handler in
api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from auth.service import login_user, register_user
from auth.store import UserStore
from auth.tokens import TokenService

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
router = APIRouter()


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create a new account. Fails with 400 username_taken if the username exists."""
    user_store: UserStore = request.app.state.user_store
    user_id = register_user(
        user_store,
        username=body.username,
        password=body.password,
        email=body.email,
        profile_pic_url=body.profile_pic_url,
        description=body.description,
    )
    return RegisterResponse(user_id=user_id)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password and return a bearer token.

    Returns the same generic error for wrong username and wrong password
    ("bad_credentials") to avoid leaking username existence information.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.token_service
    result = login_user(user_store, tokens, body.username, body.password)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=result.token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=result.expires_in,
            username=result.username,
            user_id=result.user_id,
        ).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
