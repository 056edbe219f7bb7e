from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

import models  # noqa: F401  registers tables on Base.metadata
from database import Base, engine, get_settings
from schemas import ConfigResponse
from api import games, groups, players, report, rounds

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables if they do not exist yet
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} backend starting")
    yield


app = FastAPI(
    title="LMS Manager API",
    description="Manager-run Last Man Standing games: picks, results and round advancement",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error leaves the service as {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    logger.info(f"Bad request on {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(groups.router)
app.include_router(players.router)
app.include_router(games.router)
app.include_router(rounds.router)
app.include_router(report.router)


@app.get("/api/health")
def health():
    return {"status": "ok", "service": "lms-manager"}


@app.get("/api/config", response_model=ConfigResponse)
def config():
    return ConfigResponse(app_name=settings.app_name, app_icon=settings.app_icon)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=4022)
