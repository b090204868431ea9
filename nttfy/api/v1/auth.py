import secrets

from fastapi import APIRouter, Depends, HTTPException, status
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.dependencies import get_context, get_current_user
from nttfy.services.jwt_service import create_access_token
from nttfy.schemas.auth import LoginRequest, LoginResponse, UserProfileResponse, LogoutResponse

logger = get_logger("api.auth")
router = APIRouter()

LOGIN_ERROR = "Incorrect email or password (use: user@test.com / 123456)"


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, context: AppContext = Depends(get_context)):
    """
    Demo login. The app has no auth backend: only the configured
    credentials are accepted, and a session token is issued for them.
    """
    settings = context.settings
    valid_email = secrets.compare_digest(request.email, settings.demo_email)
    valid_password = secrets.compare_digest(request.password, settings.demo_password)

    if not (valid_email and valid_password):
        logger.warning(f"Failed login attempt for {request.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=LOGIN_ERROR)

    logger.info(f"User logged in: {request.email}")
    return {"access_token": create_access_token(request.email)}


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(current_user: dict = Depends(get_current_user)):
    """Profile screen data for the logged-in user"""
    return current_user


@router.post("/logout", response_model=LogoutResponse)
async def logout(current_user: dict = Depends(get_current_user)):
    """
    Logout the user. Tokens are not tracked server side,
    the client just discards its token.
    """
    logger.info(f"User logged out: {current_user['email']}")
    return {"message": "Logged out successfully"}
