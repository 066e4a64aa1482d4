from fastapi import APIRouter

from src.sso_bridge.api.v1 import pages, session, sso

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(session.router)

browser_router = APIRouter()
browser_router.include_router(sso.router)
browser_router.include_router(pages.router)
