import logging
import os

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import settings
from .routers import enrolment


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)
    app.mount("/static", StaticFiles(directory=os.path.join(settings.ROOT_PATH, "static")), name="static")

    app.include_router(enrolment.router)
    app.include_router(enrolment.api_router)

    return app


app = create_app()
