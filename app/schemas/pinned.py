from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

RepoId = Union[StrictInt, StrictStr]


def canonical_id(value: Any) -> Optional[str]:
    """Return the string form used to compare repository ids, or None if absent.

    Stored entries keep their id exactly as submitted (GitHub sends integers,
    query strings carry text), so every comparison goes through this helper.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        text = str(value).strip()
        return text or None
    return None


class PinnedRepository(BaseModel):
    # strict: attributes are stored exactly as sent or the request is rejected
    model_config = ConfigDict(extra="allow", strict=True)

    id: RepoId
    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None
    html_url: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: Optional[int] = None
    forks_count: Optional[int] = None
    topics: Optional[List[str]] = None

    @property
    def key(self) -> Optional[str]:
        return canonical_id(self.id)

    def to_json(self) -> dict:
        # Only what the caller sent; unset attributes are not stored as nulls.
        return self.model_dump(mode="json", exclude_unset=True)


class ReorderResponse(BaseModel):
    success: bool = True
    pinned: List[dict]


class DiscoveryResponse(BaseModel):
    message: str
    endpoints: List[str]
