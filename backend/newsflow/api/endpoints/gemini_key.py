from fastapi import APIRouter, Depends, HTTPException, Response

from newsflow.api.deps import get_current_user, get_gemini_client, get_storage
from newsflow.schemas import ApiKeyIn, ApiKeyRecord, KeyValidationOut, UserRecord
from newsflow.services.gemini import GeminiClient
from newsflow.storage import Storage, StorageError

router = APIRouter()


@router.get("", response_model=ApiKeyRecord)
def read_api_key(user: UserRecord = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    try:
        api_key = storage.get_api_key(user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get API key")
    if api_key is None:
        raise HTTPException(status_code=404, detail="API key not found")
    return api_key


@router.post("", response_model=ApiKeyRecord)
def save_api_key(
    req: ApiKeyIn,
    response: Response,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Store the user's Gemini key. The key itself is opaque to the server."""
    try:
        if storage.get_api_key(user.id):
            api_key = storage.update_api_key(user.id, req.gemini_key)
            response.status_code = 200
        else:
            api_key = storage.create_api_key(user.id, req.gemini_key)
            response.status_code = 201
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save API key")

    if api_key is None:
        raise HTTPException(status_code=500, detail="Failed to save API key")
    return api_key


@router.post("/validate", response_model=KeyValidationOut)
async def validate_api_key(
    req: ApiKeyIn,
    user: UserRecord = Depends(get_current_user),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """
    Probe a key against Gemini without storing it.
    Inconclusive probes are decided by KEY_VALIDATION_POLICY.
    """
    return await gemini.validate_api_key(req.gemini_key)
