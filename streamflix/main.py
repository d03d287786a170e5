from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamflix.api.deps import get_expire_subscriptions_use_case, get_renew_subscriptions_use_case
from streamflix.api.routers.auth import router as auth_router
from streamflix.api.routers.subscriptions import router as subscriptions_router
from streamflix.infrastructure.scheduling.subscription_jobs import SubscriptionJobScheduler
from streamflix.shared.config import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    scheduler = None
    if settings.subscription_jobs_enabled:
        scheduler = SubscriptionJobScheduler(
            renew_use_case_factory=get_renew_subscriptions_use_case,
            expire_use_case_factory=get_expire_subscriptions_use_case,
        )
        scheduler.start()
    else:
        logger.info("Subscription jobs disabled; use an external scheduler")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown()


app = FastAPI(title="StreamFlix API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(subscriptions_router)


@app.get("/health")
def health():
    return {"status": "ok"}
