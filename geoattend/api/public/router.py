from fastapi import APIRouter
from geoattend.api.public import profile

router = APIRouter()
router.include_router(profile.router, prefix="/profile", tags=["Public"])
