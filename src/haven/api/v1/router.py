"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from haven.api.v1.endpoints.auth import router as auth_router
from haven.api.v1.endpoints.compliance import router as compliance_router
from haven.api.v1.endpoints.health import router as health_router
from haven.api.v1.endpoints.homework import router as homework_router
from haven.api.v1.endpoints.journals import router as journals_router
from haven.api.v1.endpoints.prompts import router as prompts_router
from haven.api.v1.endpoints.reminders import router as reminders_router
from haven.api.v1.endpoints.resources import router as resources_router
from haven.api.v1.endpoints.session import router as session_router
from haven.api.v1.endpoints.treatment import router as treatment_router
from haven.api.v1.endpoints.users import router as users_router

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["Auth"],
)

api_router.include_router(session_router, tags=["Session"])
api_router.include_router(journals_router, tags=["Journals"])
api_router.include_router(prompts_router, tags=["Prompts"])
api_router.include_router(resources_router, tags=["Resources"])
api_router.include_router(homework_router, tags=["Homework"])
api_router.include_router(reminders_router, tags=["Reminders"])
api_router.include_router(treatment_router, tags=["Treatment"])
api_router.include_router(compliance_router, tags=["Compliance"])
api_router.include_router(users_router, tags=["Users"])
