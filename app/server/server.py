from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.router import api_router
from api.dependencies.rate_limits import setup_rate_limiter
from infrastructure.services.providers import get_settings
from server.lifespan import lifespan

settings = get_settings()

handler = FastAPI(title="War Alert Relay", lifespan=lifespan)
setup_rate_limiter(handler)


allow_origins = ["*"] if settings.is_production else settings.server.CORS_ALLOW_ORIGINS
handler.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


handler.include_router(api_router)
