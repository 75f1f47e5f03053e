from fastapi import APIRouter

from . import admin

api_router = APIRouter()

api_router.include_router(admin.router)
