import json
import logging
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as SchemaError

from app.config import DEFAULT_KEY_PREFIX
from app.errors import StoreFailure, ValidationError
from app.models.store import KeyValueStore
from app.schemas.pinned import PinnedRepository, canonical_id

logger = logging.getLogger(__name__)


class PinStore:
    """Per-user ordered list of pinned repositories, one KV entry per username.

    Every mutation reads the whole list and writes it back. There is no
    version check, so two concurrent mutations for the same user can lose
    one of the updates.
    """

    def __init__(self, kv: KeyValueStore, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self.kv = kv
        self.key_prefix = key_prefix

    def key_for(self, username: str) -> str:
        return f"{self.key_prefix}{username}"

    def get(self, username: str) -> List[PinnedRepository]:
        key = self.key_for(username)
        try:
            raw = self.kv.get(key)
        except Exception as exc:
            logger.exception("Error reading pinned repos for %s", username)
            raise StoreFailure("Failed to read pinned repositories", details=str(exc)) from exc
        if raw is None:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a JSON array, got {type(items).__name__}")
            return [PinnedRepository.model_validate(item) for item in items]
        except (ValueError, SchemaError) as exc:
            logger.error("Corrupt pin list stored at %s: %s", key, exc)
            raise StoreFailure("Stored pin list is corrupt", details=str(exc)) from exc

    def add(self, username: str, repo: Optional[PinnedRepository]) -> List[PinnedRepository]:
        if repo is None or repo.key is None:
            raise ValidationError("Invalid repository data", details="repo.id is required")
        pins = self.get(username)
        if any(pin.key == repo.key for pin in pins):
            logger.debug("Repo %s already pinned for %s", repo.key, username)
            return pins
        pins.append(repo)
        self._save(username, pins)
        logger.info("Pinned repo %s for %s", repo.key, username)
        return pins

    def remove(self, username: str, repo_id: Any) -> List[PinnedRepository]:
        target = canonical_id(repo_id)
        if target is None:
            raise ValidationError("Missing repo ID")
        pins = [pin for pin in self.get(username) if pin.key != target]
        self._save(username, pins)
        logger.info("Unpinned repo %s for %s", target, username)
        return pins

    def reorder(self, username: str, repo_ids: Sequence[Any]) -> List[PinnedRepository]:
        """Move the named entries to the front in the given order.

        Existing entries left out of ``repo_ids`` keep their relative order
        after the named ones; ids that are not pinned are ignored.
        """
        if not isinstance(repo_ids, (list, tuple)):
            raise ValidationError("Invalid repository data", details="repoIds must be an array")
        order = [canonical_id(repo_id) for repo_id in repo_ids]
        if any(key is None for key in order):
            raise ValidationError("Invalid repository data", details="repoIds must contain repository ids")

        pins = self.get(username)
        by_key = {pin.key: pin for pin in pins}
        reordered: List[PinnedRepository] = []
        for key in order:
            pin = by_key.pop(key, None)
            if pin is not None:
                reordered.append(pin)
        reordered.extend(pin for pin in pins if pin.key in by_key)

        self._save(username, reordered)
        logger.info("Reordered %d pinned repos for %s", len(reordered), username)
        return reordered

    def _save(self, username: str, pins: List[PinnedRepository]) -> None:
        payload = json.dumps([pin.to_json() for pin in pins])
        try:
            self.kv.put(self.key_for(username), payload)
        except Exception as exc:
            logger.exception("Error writing pinned repos for %s", username)
            raise StoreFailure("Failed to save pinned repositories", details=str(exc)) from exc


def dump_pins(pins: List[PinnedRepository]) -> List[dict]:
    return [pin.to_json() for pin in pins]


def parse_repo_payload(data: Any) -> PinnedRepository:
    """Validate a ``{"repo": {...}}`` body; only ``repo.id`` is mandatory."""
    repo = data.get("repo") if isinstance(data, dict) else None
    if not isinstance(repo, dict) or canonical_id(repo.get("id")) is None:
        raise ValidationError("Invalid repository data")
    try:
        return PinnedRepository.model_validate(repo)
    except SchemaError as exc:
        raise ValidationError("Invalid repository data", details=str(exc)) from exc


def parse_repo_ids(data: Any) -> List[Any]:
    repo_ids = data.get("repoIds") if isinstance(data, dict) else None
    if not isinstance(repo_ids, list):
        raise ValidationError("Invalid repository data", details="repoIds must be an array")
    return repo_ids
