from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.services.jwt_service import verify_token

logger = get_logger("Dependencies")
security = HTTPBearer()


def get_context(request: Request) -> AppContext:
    """The service objects built in the app lifespan"""
    return request.app.state.context


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    context: AppContext = Depends(get_context),
) -> dict:
    """
    Dependency that validates the session token and returns the current user.
    Use this to protect endpoints.
    """
    email = verify_token(credentials.credentials)

    if email is None:
        logger.warning("Invalid or expired token attempted")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if email != context.settings.demo_email:
        logger.warning(f"Token valid but user not found: {email}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    logger.debug(f"User authenticated: {email}")
    return {"email": email, "plan": "free"}
