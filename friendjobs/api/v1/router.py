from fastapi import APIRouter

from friendjobs.api.v1.endpoints.friends import router as friends_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(friends_router)
