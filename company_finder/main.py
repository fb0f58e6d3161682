from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from company_finder.api.routes import channel, export, search
from company_finder.config import settings
from company_finder.errors import InputValidationError
from company_finder.services.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"company-finder starting (search provider: {settings.search_provider})")
    yield
    logger.info("company-finder stopped")


app = FastAPI(
    title="company-finder",
    description="Japanese company address and representative lookup",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InputValidationError)
async def input_validation_error_handler(request: Request, exc: InputValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "An error occurred while processing the request."},
    )


# Routes
app.include_router(search.router)
app.include_router(export.router)
app.include_router(channel.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "company-finder"}
