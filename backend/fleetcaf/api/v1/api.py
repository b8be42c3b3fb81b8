from fastapi import APIRouter

from fleetcaf.api.v1.endpoints import cafs, incidents, maintenance_issues, users

# Create the main API router
router = APIRouter()

router.include_router(cafs.router, prefix="/cafs", tags=["cafs"])
router.include_router(incidents.router, prefix="/incidents", tags=["incidents"])
router.include_router(
    maintenance_issues.router, prefix="/maintenance-issues", tags=["maintenance"]
)
router.include_router(users.router, prefix="/users", tags=["users"])
