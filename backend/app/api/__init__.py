"""
API 路由注册
"""

from fastapi import APIRouter
from app.api.endpoints.notices.notices import router as notices_router
from app.api.endpoints.upload.upload import router as upload_router

api_router = APIRouter()

# 注册各个模块的路由
api_router.include_router(notices_router, tags=["notices"], prefix="/notices")
api_router.include_router(upload_router, tags=["upload"])
