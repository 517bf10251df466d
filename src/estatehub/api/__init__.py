"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Unlike a blanket include_router(dependencies=...), auth is declared
per route here, because every resource mixes public and protected
endpoints (anyone can browse listings or send an inquiry).
"""

from fastapi import APIRouter

from estatehub.api.appointments import router as appointments_router
from estatehub.api.auth import router as auth_router
from estatehub.api.health import router as health_router
from estatehub.api.inquiries import router as inquiries_router
from estatehub.api.properties import router as properties_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(properties_router, tags=["properties"])
api_router.include_router(inquiries_router, tags=["inquiries"])
api_router.include_router(appointments_router, tags=["appointments"])
