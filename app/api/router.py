from fastapi import APIRouter
from app.modules.assets.router import router as assets_router
from app.modules.asset_groups.router import router as asset_groups_router
from app.modules.families.router import router as families_router
from app.modules.notifications.router import router as notifications_router
from app.modules.support.router import router as support_router

api_router = APIRouter()
api_router.include_router(assets_router, prefix="/assets", tags=["assets"])
api_router.include_router(asset_groups_router, prefix="/asset-groups", tags=["asset-groups"])
api_router.include_router(families_router, prefix="/families", tags=["families"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
# public: no principal required
api_router.include_router(support_router, prefix="/support", tags=["support"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
