"""
Admin API Endpoints

Provides:
- Account listing, admin grant/revoke and deletion
- Read access to every user's saved articles
- The audit log (read and append)

Admins may not change their own admin status or delete themselves. Every
successful mutation of another account appends one audit entry in the same
storage write, before the response goes out.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from newsflow.api.deps import get_current_admin, get_storage
from newsflow.models.admin_log import AdminAction
from newsflow.schemas import (
    AdminLogCreate,
    AdminLogIn,
    AdminLogRecord,
    AdminStatusUpdate,
    MessageOut,
    SavedArticleRecord,
    UserOut,
    UserRecord,
)
from newsflow.storage import Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()

TARGET_USER = "USER"


@router.get("/users", response_model=List[UserOut])
def read_users(admin: UserRecord = Depends(get_current_admin), storage: Storage = Depends(get_storage)):
    try:
        return [u.public() for u in storage.get_all_users()]
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get users")


@router.get("/saved-articles", response_model=List[SavedArticleRecord])
def read_all_saved_articles(admin: UserRecord = Depends(get_current_admin), storage: Storage = Depends(get_storage)):
    try:
        return storage.get_all_saved_articles()
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get saved articles")


@router.put("/users/{user_id}/admin-status", response_model=UserOut)
def update_admin_status(
    user_id: int,
    req: AdminStatusUpdate,
    admin: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot change your own admin status")

    action = AdminAction.GRANT_ADMIN if req.isAdmin else AdminAction.REVOKE_ADMIN
    log = AdminLogCreate(
        admin_id=admin.id,
        action=action.value,
        target_type=TARGET_USER,
        target_id=str(user_id),
        details=f"{'Granted' if req.isAdmin else 'Revoked'} admin privileges for user ID {user_id}",
    )
    try:
        updated = storage.set_user_admin_status(user_id, req.isAdmin, log=log)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to update user admin status")
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"Admin {admin.id}: {action.value} user {user_id}")
    return updated.public()


@router.delete("/users/{user_id}", response_model=MessageOut)
def delete_user(
    user_id: int,
    admin: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Delete an account together with its interests, key, saved articles and authored logs."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    try:
        user = storage.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")

        deleted = storage.delete_user(user_id, log=AdminLogCreate(
            admin_id=admin.id,
            action=AdminAction.DELETE_USER.value,
            target_type=TARGET_USER,
            target_id=str(user_id),
            details=f"Deleted user account: {user.username} ({user.email})",
        ))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to delete user")
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found or deletion failed")

    logger.info(f"Admin {admin.id}: DELETE_USER {user_id} ({user.username})")
    return {"message": "User deleted successfully"}


@router.get("/logs", response_model=List[AdminLogRecord])
def read_admin_logs(admin: UserRecord = Depends(get_current_admin), storage: Storage = Depends(get_storage)):
    """Audit entries, newest first."""
    try:
        return storage.get_admin_logs()
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get admin logs")


@router.post("/logs", response_model=AdminLogRecord, status_code=201)
def create_admin_log(
    req: AdminLogIn,
    admin: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    if not req.action or not req.target_type or req.target_id in (None, ""):
        raise HTTPException(status_code=400, detail="action, target_type, and target_id are required")

    try:
        return storage.create_admin_log(AdminLogCreate(
            admin_id=admin.id,
            action=req.action,
            target_type=req.target_type,
            target_id=str(req.target_id),
            details=req.details,
        ))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to create admin log")
