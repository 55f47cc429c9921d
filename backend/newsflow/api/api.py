from fastapi import APIRouter
from newsflow.api.endpoints import auth, users, interests, gemini_key, news, saved_articles, admin

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/user", tags=["user"])
api_router.include_router(interests.router, prefix="/interests", tags=["interests"])
api_router.include_router(gemini_key.router, prefix="/gemini-key", tags=["gemini-key"])
api_router.include_router(news.router, tags=["news"])
api_router.include_router(saved_articles.router, prefix="/saved-articles", tags=["saved-articles"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
