import logging

from fastapi import APIRouter, Depends, HTTPException

from newsflow.api.deps import get_current_user, get_storage
from newsflow.core.security import hash_password
from newsflow.schemas import ProfileUpdate, UserOut, UserRecord
from newsflow.storage import ConflictError, Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserOut)
def get_profile(user: UserRecord = Depends(get_current_user)):
    """Get current user profile."""
    return user.public()


@router.patch("", response_model=UserOut)
def update_profile(
    req: ProfileUpdate,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Update username, email, names or password of the current user."""
    try:
        if req.username and req.username != user.username and storage.get_user_by_username(req.username):
            raise HTTPException(status_code=400, detail="Username already exists")
        if req.email and req.email != user.email and storage.get_user_by_email(req.email):
            raise HTTPException(status_code=400, detail="Email already in use")

        updated = storage.update_user(
            user.id,
            username=req.username,
            email=req.email,
            first_name=req.first_name,
            last_name=req.last_name,
            password=hash_password(req.password) if req.password else None,
        )
    except ConflictError:
        raise HTTPException(status_code=400, detail="Username or email already in use")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to update profile")

    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return updated.public()
