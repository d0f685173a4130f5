"""
API Router - JSON Endpoints
"""
from fastapi import APIRouter
from datetime import datetime

from rewardstore.api import auth, orders, points, products, users

api_router = APIRouter(tags=["API"])

# Include sub-routers
api_router.include_router(auth.router)
api_router.include_router(products.router)
api_router.include_router(products.admin_router)
api_router.include_router(orders.router)
api_router.include_router(orders.admin_router)
api_router.include_router(points.router)
api_router.include_router(points.admin_router)
api_router.include_router(users.router)
api_router.include_router(users.admin_router)

# ===================== HEALTH & STATUS =====================

@api_router.get("/status")
async def api_status():
    return {"status": "ok", "version": "1.0.0", "timestamp": datetime.now().isoformat()}
