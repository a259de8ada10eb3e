from fastapi import APIRouter
from b4_platform.api.v1.endpoints import (
    account,
    admin,
    applications,
    dashboard,
    exports,
    ideas,
    journeys,
    notifications,
    onboarding,
    submissions,
)

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["Onboarding"])
api_router.include_router(journeys.router, prefix="/journeys", tags=["Learning Journeys"])
api_router.include_router(ideas.router, prefix="/ideas", tags=["Ideas"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(exports.router, prefix="/exports", tags=["Exports"])
api_router.include_router(submissions.router, prefix="/submissions", tags=["Submissions"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])
api_router.include_router(account.router, prefix="/account", tags=["Account"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

__all__ = ["api_router"]
