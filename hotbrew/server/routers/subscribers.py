"""Subscription, config and newsletter endpoints."""
from __future__ import annotations

import asyncio
import logging
import re

from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError

from hotbrew.server.models import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    NewsletterResponse,
    SubscribeRequest,
    SubscribeResponse,
    UserConfig,
)
from hotbrew.server.ratelimit import client_ip
from hotbrew.shared.errors import (
    NotFoundError,
    ParsingError,
    PayloadTooLargeError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["subscribers"])

MAX_BODY_BYTES = 64 * 1024
EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def _validate(req: SubscribeRequest) -> None:
    if not req.email or len(req.email) > MAX_EMAIL_LENGTH or not EMAIL_RE.match(req.email):
        raise ParsingError("Valid email required")
    if len(req.name) > MAX_NAME_LENGTH:
        raise ParsingError("Name too long")


async def read_limited_body(request: Request, limit: int = MAX_BODY_BYTES) -> bytes:
    """Read the request body, giving up as soon as it passes *limit* bytes.

    Raises:
        PayloadTooLargeError: If ``Content-Length`` or the bytes received
            exceed *limit*.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError()

    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            raise PayloadTooLargeError()
    return bytes(body)


@router.post("/subscribe")
async def subscribe(request: Request) -> SubscribeResponse:
    """Register a subscriber and return their login token."""
    if not request.app.state.rate_limiter.allow(client_ip(request)):
        raise RateLimitError()

    body = await read_limited_body(request)
    try:
        req = SubscribeRequest.model_validate_json(body or b"{}")
    except PydanticValidationError:
        raise ParsingError("Invalid request") from None
    _validate(req)

    subscriber = await asyncio.to_thread(request.app.state.subscribers.add, req.email, req.name)
    logger.info("New subscriber registered")
    return SubscribeResponse(
        token=subscriber.token,
        message=f"Welcome to hotbrew! Run: hotbrew login {subscriber.token}",
    )


@router.get("/config/{token}")
async def get_config(token: str, request: Request) -> UserConfig:
    subscriber = request.app.state.subscribers.get(token)
    if subscriber is None:
        raise NotFoundError("Invalid token")
    return subscriber.config


@router.get("/newsletter/{token}")
async def get_newsletter(token: str, request: Request) -> NewsletterResponse:
    if request.app.state.subscribers.get(token) is None:
        raise NotFoundError("Invalid token")
    return NewsletterResponse()
