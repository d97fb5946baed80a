from fastapi import FastAPI

from agentaria.api.routes import api_router
from agentaria.api.routes.onboarding import get_run_registry
from agentaria.config.settings import settings
from agentaria.core.db import engine
from agentaria.core.logging_config import setup_logging
from agentaria.infrastructure.db.base import Base
from agentaria.infrastructure.db import models  # noqa: F401  (registers tables)

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.on_event("shutdown")
async def shutdown():
    get_run_registry().shutdown()
    await engine.dispose()


app.include_router(api_router)
