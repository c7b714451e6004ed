from fastapi import APIRouter
from geoattend.api.admin import users

router = APIRouter()
router.include_router(users.router, prefix="/users", tags=["AdminUsers"])
