from fastapi import APIRouter, Depends
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.dependencies import get_context
from nttfy.schemas.theme import ThemeResponse

logger = get_logger("api.theme")
router = APIRouter()


@router.get("", response_model=ThemeResponse)
async def get_theme(context: AppContext = Depends(get_context)):
    """Current theme. Public: the login screen is themed too."""
    return {"theme": context.theme.theme}


@router.post("/toggle", response_model=ThemeResponse)
async def toggle_theme(context: AppContext = Depends(get_context)):
    theme = await context.theme.toggle_theme()
    logger.info(f"Theme switched to {theme.value}")
    await context.push_theme()
    return {"theme": theme}
