from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import access_token, current_user, get_pin_client, read_json_body
from app.errors import ValidationError
from app.services.pin_client import PinServiceClient
from app.services.pinned import parse_repo_ids, parse_repo_payload

router = APIRouter(prefix="/api", tags=["session"])


@router.get("/pinned")
def my_pinned(user: str = Depends(current_user), client: PinServiceClient = Depends(get_pin_client)):
    return client.get_pinned(user)


@router.post("/pin")
def pin(
    user: str = Depends(current_user),
    token: str = Depends(access_token),
    data: Any = Depends(read_json_body),
    client: PinServiceClient = Depends(get_pin_client),
):
    repo = parse_repo_payload(data)
    return client.pin(user, repo)


@router.delete("/pin")
def unpin(
    repo_id: Optional[str] = Query(None, alias="id"),
    user: str = Depends(current_user),
    client: PinServiceClient = Depends(get_pin_client),
):
    if not repo_id:
        raise ValidationError("Repository ID is required")
    return client.unpin(user, repo_id)


@router.post("/reorder")
def reorder(
    user: str = Depends(current_user),
    token: str = Depends(access_token),
    data: Any = Depends(read_json_body),
    client: PinServiceClient = Depends(get_pin_client),
):
    repo_ids = parse_repo_ids(data)
    return client.reorder(user, repo_ids, token)
