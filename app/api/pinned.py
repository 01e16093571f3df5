from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_pin_store, read_json_body
from app.errors import ValidationError
from app.schemas.pinned import ReorderResponse
from app.services.pinned import PinStore, dump_pins, parse_repo_ids, parse_repo_payload

router = APIRouter(prefix="/user", tags=["pinned"])


def _username(username: str) -> str:
    username = username.strip()
    if not username:
        raise ValidationError("Username is required")
    return username


@router.get("/{username}/pinned")
@router.get("/{username}/pinned/", include_in_schema=False)
def list_pinned(username: str, pin_store: PinStore = Depends(get_pin_store)):
    return dump_pins(pin_store.get(_username(username)))


@router.post("/{username}/pinned")
@router.post("/{username}/pinned/", include_in_schema=False)
def pin_repo(username: str, data: Any = Depends(read_json_body), pin_store: PinStore = Depends(get_pin_store)):
    repo = parse_repo_payload(data)
    return dump_pins(pin_store.add(_username(username), repo))


@router.delete("/{username}/pinned")
@router.delete("/{username}/pinned/", include_in_schema=False)
def unpin_repo(
    username: str,
    repo_id: Optional[str] = Query(None, alias="id"),
    pin_store: PinStore = Depends(get_pin_store),
):
    if not repo_id:
        raise ValidationError("Missing repo ID")
    return dump_pins(pin_store.remove(_username(username), repo_id))


@router.post("/{username}/reorder", response_model=ReorderResponse)
@router.post("/{username}/reorder/", response_model=ReorderResponse, include_in_schema=False)
def reorder_pinned(username: str, data: Any = Depends(read_json_body), pin_store: PinStore = Depends(get_pin_store)):
    repo_ids = parse_repo_ids(data)
    pins = pin_store.reorder(_username(username), repo_ids)
    return ReorderResponse(pinned=dump_pins(pins))
