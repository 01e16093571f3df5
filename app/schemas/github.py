from typing import List, Optional

from pydantic import BaseModel, Field


class GitHubRepo(BaseModel):
    id: int
    name: str
    full_name: Optional[str] = None
    description: Optional[str] = None
    html_url: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    topics: List[str] = Field(default_factory=list)
