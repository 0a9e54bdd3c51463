import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load env from the working directory .env before settings are read
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from stylebook.core.config import settings, validate_config
from stylebook.core.logging import configure_logging
from stylebook.core.middleware.request_id import RequestIdMiddleware
from stylebook.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from stylebook.api import care, chat, health, shopping, subscription, wardrobe
from stylebook.features.ai.client import build_completion_client

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("stylebook")
    logger.info("Starting Stylebook backend...")
    app.state.completion_client = build_completion_client()
    try:
        yield
    finally:
        app.state.completion_client = None
        logging.getLogger("stylebook").info("Stopping Stylebook backend...")


app = FastAPI(title="Stylebook - Backend", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(care.router)
app.include_router(shopping.router)
app.include_router(chat.router)
app.include_router(subscription.router)
app.include_router(wardrobe.router)
