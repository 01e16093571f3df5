from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.api.deps import access_token, get_github_client, optional_token
from app.schemas.github import GitHubRepo
from app.services.github import GitHubClient

router = APIRouter(prefix="/api", tags=["github"])


@router.get("/repos", response_model=List[GitHubRepo])
def my_repos(token: str = Depends(access_token), github: GitHubClient = Depends(get_github_client)):
    return github.list_repos(token)


@router.get("/github/user/{username}")
def github_user(
    username: str,
    token: Optional[str] = Depends(optional_token),
    github: GitHubClient = Depends(get_github_client),
):
    return github.get_user(username, token)


@router.get("/github/orgs/{username}")
def github_orgs(
    username: str,
    token: Optional[str] = Depends(optional_token),
    github: GitHubClient = Depends(get_github_client),
):
    return github.list_orgs(username, token)


@router.get("/github/topics/{username}", response_model=List[str])
def github_topics(
    username: str,
    token: Optional[str] = Depends(optional_token),
    github: GitHubClient = Depends(get_github_client),
):
    return github.top_topics(username, token)


@router.get("/github/readme/{username}", response_class=PlainTextResponse)
def github_readme(
    username: str,
    token: Optional[str] = Depends(optional_token),
    github: GitHubClient = Depends(get_github_client),
):
    return PlainTextResponse(github.get_profile_readme(username, token), media_type="text/markdown")
