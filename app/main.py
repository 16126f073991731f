import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app import config
from app.routes import api

# App configuration
APP_NAME = "Recipe Fetch"
VERSION = "1.0.0"

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report which upstream sources have credentials at startup."""
    app_id, app_key = config.edamam_credentials()
    if not config.spoonacular_api_key():
        logger.warning("SPOONACULAR_API_KEY not set; premium source will fail")
    if not (app_id and app_key):
        logger.warning("EDAMAM_APP_ID/EDAMAM_APP_KEY not set; nutrition source will fail")
    yield


# Create FastAPI app
app = FastAPI(title=APP_NAME, version=VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def answer_preflight(request: Request, call_next):
    """Every OPTIONS request gets an empty 200 with permissive CORS headers."""
    if request.method != "OPTIONS":
        return await call_next(request)
    requested = request.headers.get("access-control-request-headers")
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
            "Access-Control-Allow-Headers": requested or ", ".join(CORS_ALLOW_HEADERS),
        },
    )


# Include routers
app.include_router(api.router)


# Basic health check
@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
