import yaml
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from washboard.infrastructure.config import settings
from washboard.infrastructure.database import Base, engine
from washboard.infrastructure.logger_config import configure_logging
from washboard.infrastructure.models import models  # noqa: F401  (registers tables on Base)
from washboard.presentation.routers import router

configure_logging(settings.log_level)

app = FastAPI(title="washboard")


# Use the contractual schema
def custom_openapi():
    with open(settings.openapi_path) as f:
        return yaml.safe_load(f)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are a client error (400), not FastAPI's default 422."""
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


app.openapi = custom_openapi
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
Base.metadata.create_all(bind=engine)
app.include_router(router)
