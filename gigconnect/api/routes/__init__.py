"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from gigconnect.api.routes.paystack_routes import router as paystack_router

# Main API router
api_router = APIRouter()

api_router.include_router(paystack_router)
