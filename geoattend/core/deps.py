from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from geoattend.core.config import settings
from geoattend.services.appwrite import AppwriteError, get_account

bearer = HTTPBearer(auto_error=False)

def get_current_session(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(status_code=401, detail="Missing authorization token")
    try:
        account = get_account(creds.credentials)
    except AppwriteError as exc:
        if exc.status_code in {401, 403}:
            raise HTTPException(status_code=401, detail="Invalid or expired session")
        raise HTTPException(status_code=502, detail="Authentication provider unavailable")
    return {"jwt": creds.credentials, "account": account}

def require_admin(session: dict = Depends(get_current_session)) -> dict:
    labels = session["account"].get("labels")
    if not isinstance(labels, list) or settings.ADMIN_LABEL not in labels:
        raise HTTPException(status_code=403, detail="Admin access required")
    return session
