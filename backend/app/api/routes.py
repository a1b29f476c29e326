from __future__ import annotations

from fastapi import APIRouter

from app.api.v1 import routes, tours

router = APIRouter()
router.include_router(routes.router, prefix="/v1/routes", tags=["routes"])
router.include_router(tours.router, prefix="/v1/tour", tags=["tour"])
