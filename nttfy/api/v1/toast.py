from fastapi import APIRouter, Depends
from nttfy.context import AppContext
from nttfy.dependencies import get_context, get_current_user
from nttfy.schemas.toast import ToastResponse

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=ToastResponse)
async def get_toast(context: AppContext = Depends(get_context)):
    return {"message": context.toast.message}


@router.post("/clear", response_model=ToastResponse)
async def clear_toast(context: AppContext = Depends(get_context)):
    await context.toast.clear()
    return {"message": context.toast.message}
