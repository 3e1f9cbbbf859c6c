from fastapi import APIRouter

from app.api.v1.endpoints.health import router as health_router
from app.api.v1.endpoints.offices import router as offices_router
from app.api.v1.endpoints.office_images import router as office_images_router
from app.api.v1.endpoints.tags import router as tags_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(offices_router, tags=["offices"])
router.include_router(office_images_router, tags=["office-images"])
router.include_router(tags_router, tags=["tags"])
