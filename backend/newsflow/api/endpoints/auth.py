"""
Session Authentication

Provides:
- Signup (email + username + password), which also starts a session
- Login with email and password
- Logout

The session is a signed cookie carrying the user id.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from newsflow.api.deps import get_current_user, get_storage, login_session
from newsflow.core.security import hash_password, verify_password
from newsflow.schemas import LoginRequest, MessageOut, SignupRequest, UserCreate, UserOut, UserRecord
from newsflow.storage import ConflictError, Storage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(req: SignupRequest, request: Request, storage: Storage = Depends(get_storage)):
    """Register a new user and log them in."""
    try:
        if storage.get_user_by_username(req.username):
            raise HTTPException(status_code=400, detail="Username already exists")
        if storage.get_user_by_email(req.email):
            raise HTTPException(status_code=400, detail="Email already in use")

        user = storage.create_user(UserCreate(
            username=req.username,
            email=req.email,
            password=hash_password(req.password),
            first_name=req.first_name,
            last_name=req.last_name,
        ))
    except ConflictError:
        raise HTTPException(status_code=400, detail="Username or email already in use")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to create user")

    login_session(request, user)
    logger.info(f"New user registered: {user.username} (id {user.id})")
    return user.public()


@router.post("/login", response_model=UserOut)
def login(req: LoginRequest, request: Request, storage: Storage = Depends(get_storage)):
    """Login with email and password."""
    try:
        user = storage.get_user_by_email(req.email)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to log in")

    if not user or not verify_password(user.password, req.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    login_session(request, user)
    return user.public()


@router.post("/logout", response_model=MessageOut)
def logout(request: Request, user: UserRecord = Depends(get_current_user)):
    request.session.clear()
    return {"message": "Logged out successfully"}
