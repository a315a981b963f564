from fastapi import APIRouter
from api.v1.routes.war_alerts import router as war_alerts_router
from api.v1.routes.status import router as status_router


# Main v1 router (includes all endpoints)
router = APIRouter()
router.include_router(war_alerts_router)
router.include_router(status_router)
