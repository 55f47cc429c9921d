from fastapi import APIRouter, Depends, HTTPException, Response

from newsflow.api.deps import get_current_user, get_storage
from newsflow.schemas import InterestIn, InterestRecord, UserRecord
from newsflow.storage import Storage, StorageError

router = APIRouter()


def _save_interests(req: InterestIn, user: UserRecord, storage: Storage, response: Response) -> InterestRecord:
    """Create the row on first save (201), replace the list afterwards (200)."""
    try:
        if storage.get_interests(user.id):
            interest = storage.update_interests(user.id, req.categories)
            response.status_code = 200
        else:
            interest = storage.create_interests(user.id, req.categories)
            response.status_code = 201
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save interests")

    if interest is None:
        raise HTTPException(status_code=500, detail="Failed to save interests")
    return interest


@router.get("", response_model=InterestRecord)
def read_interests(user: UserRecord = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    try:
        interest = storage.get_interests(user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get interests")
    if interest is None:
        raise HTTPException(status_code=404, detail="Interests not found")
    return interest


@router.post("", response_model=InterestRecord)
def create_interests(
    req: InterestIn,
    response: Response,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return _save_interests(req, user, storage, response)


@router.put("", response_model=InterestRecord)
def update_interests(
    req: InterestIn,
    response: Response,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Replace the interest list, standard categories and custom topics alike."""
    return _save_interests(req, user, storage, response)
