from fastapi import APIRouter

from agentaria.api.routes.health import router as health_router
from agentaria.api.routes.onboarding import router as onboarding_router

api_router = APIRouter()

# Public / health
api_router.include_router(health_router, tags=["health"])

# Onboarding chat (Bearer JWT auth)
api_router.include_router(onboarding_router)
