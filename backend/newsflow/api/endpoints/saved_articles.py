from typing import List

from fastapi import APIRouter, Depends, HTTPException

from newsflow.api.deps import get_current_user, get_storage
from newsflow.schemas import MessageOut, SavedArticleCreate, SavedArticleRecord, UserRecord
from newsflow.storage import ConflictError, Storage, StorageError

router = APIRouter()

ALREADY_SAVED_MESSAGE = "Article already saved"


@router.post("", response_model=SavedArticleRecord, status_code=201)
def save_article(
    article: SavedArticleCreate,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Bookmark an article. Saving the same article_id twice is rejected."""
    try:
        if storage.get_saved_article(user.id, article.article_id):
            raise HTTPException(status_code=400, detail=ALREADY_SAVED_MESSAGE)
        return storage.create_saved_article(user.id, article)
    except ConflictError:
        # Lost a race with a concurrent save of the same article
        raise HTTPException(status_code=400, detail=ALREADY_SAVED_MESSAGE)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save article")


@router.get("", response_model=List[SavedArticleRecord])
def read_saved_articles(user: UserRecord = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    try:
        return storage.get_saved_articles(user.id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get saved articles")


# article ids are URLs, so the parameter has to accept slashes
@router.delete("/{article_id:path}", response_model=MessageOut)
def delete_saved_article(
    article_id: str,
    user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    try:
        deleted = storage.delete_saved_article(user.id, article_id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to delete saved article")
    if not deleted:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"message": "Article removed from saved"}
