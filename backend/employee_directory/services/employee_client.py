"""HTTP client for the remote employee service (list + update)."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Generic, TypeVar

import aiohttp
from pydantic import BaseModel, TypeAdapter, ValidationError

from employee_directory.core.config import Settings
from employee_directory.models.employee import ApiEnvelope, Employee, UpdatePayload

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPLOYEE_LIST = TypeAdapter(list[Employee])

_BODY_PREVIEW_CHARS = 200


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    DECODE = "decode"
    REJECTED = "rejected"
    NOT_CONFIGURED = "not_configured"


class Ok(BaseModel, Generic[T]):
    value: T

    model_config = {"frozen": True}


class Err(BaseModel):
    kind: ErrorKind
    message: str = ""

    model_config = {"frozen": True}


class EmployeeClient:
    def __init__(self) -> None:
        self.initialized = False
        self.list_url = ""
        self.update_url = ""
        self.timeout_seconds = 30.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.EMPLOYEE_API_BASE_URL:
            logger.warning("Employee API base URL missing — EmployeeClient not initialized")
            return

        base_url = settings.EMPLOYEE_API_BASE_URL.rstrip("/")
        self.list_url = f"{base_url}{settings.EMPLOYEE_LIST_PATH}"
        self.update_url = f"{base_url}{settings.EMPLOYEE_UPDATE_PATH}"
        self.timeout_seconds = settings.EMPLOYEE_API_TIMEOUT_SECONDS
        self.initialized = True
        logger.info("EmployeeClient initialized (list=%s)", self.list_url)

    async def close(self) -> None:
        self.initialized = False
        self.list_url = ""
        self.update_url = ""

    def _headers(self, token: str) -> dict[str, str]:
        # an empty token is still sent; the service rejects it
        return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    async def fetch_employees(self, token: str) -> Ok[list[Employee]] | Err:
        if not self.initialized:
            return Err(kind=ErrorKind.NOT_CONFIGURED, message="EmployeeClient not initialized")

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.list_url, headers=self._headers(token)) as response:
                    if not 200 <= response.status < 300:
                        return Err(
                            kind=ErrorKind.TRANSPORT,
                            message=f"Network response was not ok: {response.status}",
                        )

                    content_type = response.headers.get("Content-Type", "")
                    if "application/json" not in content_type:
                        body = await response.text()
                        return Err(
                            kind=ErrorKind.DECODE,
                            message=f"Expected JSON but received: {body[:_BODY_PREVIEW_CHARS]}",
                        )

                    payload = await response.json(content_type=None)
        except asyncio.TimeoutError:
            return Err(kind=ErrorKind.TIMEOUT, message=f"No response within {self.timeout_seconds}s")
        except aiohttp.ClientError as e:
            return Err(kind=ErrorKind.TRANSPORT, message=str(e))
        except ValueError as e:
            return Err(kind=ErrorKind.DECODE, message=f"Invalid JSON body: {e}")

        return self._parse_envelope(payload)

    def _parse_envelope(self, payload: Any) -> Ok[list[Employee]] | Err:
        try:
            envelope = ApiEnvelope.model_validate(payload)
        except ValidationError as e:
            return Err(kind=ErrorKind.DECODE, message=f"Malformed envelope ({e.error_count()} errors)")

        if envelope.status != "success":
            return Err(kind=ErrorKind.REJECTED, message=envelope.message or "Unknown error")

        if not isinstance(envelope.data, list):
            return Err(kind=ErrorKind.DECODE, message="Envelope data is not a list")

        try:
            employees = _EMPLOYEE_LIST.validate_python(envelope.data)
        except ValidationError as e:
            return Err(kind=ErrorKind.DECODE, message=f"Malformed employee records ({e.error_count()} errors)")

        return Ok(value=employees)

    async def update_employee(self, token: str, payload: UpdatePayload) -> Ok[None] | Err:
        if not self.initialized:
            return Err(kind=ErrorKind.NOT_CONFIGURED, message="EmployeeClient not initialized")

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.put(
                    self.update_url,
                    headers=self._headers(token),
                    json=payload.model_dump(by_alias=True),
                ) as response:
                    if 200 <= response.status < 300:
                        return Ok(value=None)

                    error_text = await response.text()
                    return Err(
                        kind=ErrorKind.TRANSPORT,
                        message=f"Update failed: {response.status} - {error_text[:_BODY_PREVIEW_CHARS]}",
                    )
        except asyncio.TimeoutError:
            return Err(kind=ErrorKind.TIMEOUT, message=f"No response within {self.timeout_seconds}s")
        except aiohttp.ClientError as e:
            return Err(kind=ErrorKind.TRANSPORT, message=str(e))

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False

        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.list_url) as response:
                    return response.status < 500
        except Exception:
            logger.exception("EmployeeClient connection check failed")
            return False


employee_client = EmployeeClient()
