from fastapi import APIRouter
from eventtix.api.routes.auth import router as auth_router
from eventtix.api.routes.tickets import router as tickets_router
from eventtix.api.routes.admin import router as admin_router
from eventtix.api.routes.pages import router as pages_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(tickets_router)
api_router.include_router(admin_router)
