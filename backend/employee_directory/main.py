from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from employee_directory.api.v1.router import api_router
from employee_directory.core.config import settings
from employee_directory.services.directory_store import directory_sessions
from employee_directory.services.employee_client import employee_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await employee_client.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize EmployeeClient — continuing without employee API")
    directory_sessions.configure(settings)
    yield
    directory_sessions.clear()
    await employee_client.close()


app = FastAPI(
    title="Employee Directory API",
    description="Employee list, inline edit and PDF/XLSX export",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Employee Directory API"}
