import json
from typing import Any, Optional

from fastapi import Cookie, Request

from app.errors import Unauthorized, ValidationError
from app.services.github import GitHubClient
from app.services.pin_client import PinServiceClient
from app.services.pinned import PinStore


async def read_json_body(request: Request) -> Any:
    body = await request.body()
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise ValidationError("Invalid JSON in request body", details=str(exc)) from exc


def get_pin_store(request: Request) -> PinStore:
    return request.app.state.pin_store


def get_pin_client(request: Request) -> PinServiceClient:
    return request.app.state.pin_client


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client


def current_user(user: Optional[str] = Cookie(None)) -> str:
    if not user:
        raise Unauthorized()
    return user


def access_token(token: Optional[str] = Cookie(None)) -> str:
    if not token:
        raise Unauthorized()
    return token


def optional_token(token: Optional[str] = Cookie(None)) -> Optional[str]:
    return token or None
