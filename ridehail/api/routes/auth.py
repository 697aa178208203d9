"""
Auth endpoints
==============

POST /api/v1/auth/register -- create an account and get a bearer token
POST /api/v1/auth/login    -- exchange credentials for a bearer token
GET  /api/v1/auth/me       -- the authenticated user
"""

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_accounts, get_current_user
from ridehail.api.middleware import limiter
from ridehail.api.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from ridehail.config import settings
from ridehail.domain.entities import User
from ridehail.services.accounts import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=AccountService.issue_token(user),
        user=UserResponse.model_validate(user),
    )


# register and login hash with bcrypt, so they are plain ``def`` handlers
# and FastAPI runs them in its threadpool instead of on the event loop.


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    summary="Register a passenger or driver",
    responses={409: {"description": "Username or email already taken."}},
)
@limiter.limit(settings.rate_limit)
def register(
    request: Request,
    body: RegisterRequest,
    accounts: AccountService = Depends(get_accounts),
):
    user = accounts.register(**body.model_dump(exclude={"confirm_password"}))
    return _token_response(user)


@router.post("/login", response_model=TokenResponse, summary="Log in")
@limiter.limit(settings.rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    accounts: AccountService = Depends(get_accounts),
):
    return _token_response(accounts.authenticate(body.username, body.password))


@router.get("/me", response_model=UserResponse, summary="Current user")
@limiter.limit(settings.rate_limit)
async def me(request: Request, user: User = Depends(get_current_user)):
    return user
