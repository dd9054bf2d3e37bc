"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from campus_portal.api.routes.auth_routes import router as auth_router
from campus_portal.api.routes.user_routes import router as user_router
from campus_portal.api.routes.company_routes import router as company_router
from campus_portal.api.routes.training_routes import router as training_router
from campus_portal.api.routes.placement_record_routes import router as placement_record_router
from campus_portal.api.routes.dashboard_routes import router as dashboard_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(company_router)
api_router.include_router(training_router)
api_router.include_router(placement_record_router)
api_router.include_router(dashboard_router)
