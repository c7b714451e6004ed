import logging

from fastapi import APIRouter, Depends, HTTPException

from geoattend.core.deps import get_current_session
from geoattend.schemas.profile import ProfileOut, ProfileUpdate
from geoattend.services.appwrite import AppwriteError
from geoattend.services.profile import profile_from_account, save_profile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProfileOut, response_model_by_alias=True)
def get_profile(session: dict = Depends(get_current_session)):
    return profile_from_account(session["account"])


@router.put("", response_model=ProfileOut, response_model_by_alias=True)
def update_profile(payload: ProfileUpdate, session: dict = Depends(get_current_session)):
    try:
        return save_profile(session["jwt"], session["account"], payload)
    except AppwriteError as exc:
        logger.exception("profile update failed")
        if exc.status_code in {401, 403}:
            raise HTTPException(status_code=401, detail="Invalid or expired session")
        raise HTTPException(status_code=502, detail="An error occurred while saving your profile")
