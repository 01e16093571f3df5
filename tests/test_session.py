import json

import httpx
import pytest

SIGNED_IN = {"user": "octocat", "token": "gho_secret"}


def test_requires_user_cookie(make_client):
    client = make_client()
    for r in (client.get("/api/pinned"), client.post("/api/pin", json={"repo": {"id": 1}})):
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized"}


def test_pin_requires_token_cookie(make_client):
    client = make_client(cookies={"user": "octocat"})
    r = client.post("/api/pin", json={"repo": {"id": 1}})
    assert r.status_code == 401


def test_get_pinned_forwards_to_pin_service(make_client):
    def handler(request):
        assert request.method == "GET"
        assert request.url.path == "/user/octocat/pinned"
        return httpx.Response(200, json=[{"id": 1, "name": "x"}])

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.get("/api/pinned")
    assert r.status_code == 200
    assert r.json() == [{"id": 1, "name": "x"}]


def test_get_pinned_treats_404_as_empty(make_client):
    client = make_client(pin_handler=lambda request: httpx.Response(404, text="Not Found"), cookies=SIGNED_IN)
    assert client.get("/api/pinned").json() == []


def test_pin_forwards_repo(make_client):
    def handler(request):
        assert request.method == "POST"
        assert request.url.path == "/user/octocat/pinned"
        assert json.loads(request.content) == {"repo": {"id": 5, "name": "five"}}
        return httpx.Response(200, json=[{"id": 5, "name": "five"}])

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.post("/api/pin", json={"repo": {"id": 5, "name": "five"}})
    assert r.status_code == 200
    assert r.json() == [{"id": 5, "name": "five"}]


def test_pin_validates_before_forwarding(make_client):
    client = make_client(cookies=SIGNED_IN)
    r = client.post("/api/pin", json={"repo": {"name": "no id"}})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid repository data"


def test_unpin_forwards_id(make_client):
    def handler(request):
        assert request.method == "DELETE"
        assert request.url.params["id"] == "3"
        return httpx.Response(200, json=[])

    client = make_client(pin_handler=handler, cookies={"user": "octocat"})
    r = client.delete("/api/pin", params={"id": "3"})
    assert r.status_code == 200
    assert r.json() == []


def test_unpin_requires_id(make_client):
    client = make_client(cookies={"user": "octocat"})
    r = client.delete("/api/pin")
    assert r.status_code == 400
    assert r.json() == {"error": "Repository ID is required"}


def test_reorder_sends_bearer_token(make_client):
    def handler(request):
        assert request.url.path == "/user/octocat/reorder"
        assert request.headers["authorization"] == "Bearer gho_secret"
        return httpx.Response(200, json={"success": True, "pinned": [{"id": 2}, {"id": 1}]})

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.post("/api/reorder", json={"repoIds": [2, 1]})
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_non_json_upstream_is_502(make_client):
    def handler(request):
        return httpx.Response(200, text="<html>worker exploded</html>", headers={"content-type": "text/html"})

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.post("/api/pin", json={"repo": {"id": 1}})
    assert r.status_code == 502
    body = r.json()
    assert body["error"] == "Invalid response from pin service"
    assert body["details"].startswith("<html>")
    assert body["status"] == 200
    assert r.headers["access-control-allow-origin"] == "*"


def test_upstream_error_is_500_without_leaking_token(make_client):
    def handler(request):
        return httpx.Response(500, json={"error": "Internal server error"})

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.post("/api/reorder", json={"repoIds": [1]})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to reorder repositories"
    assert "500" in body["details"]
    assert "gho_secret" not in r.text


def test_unreachable_pin_service_is_500(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(pin_handler=handler, cookies=SIGNED_IN)
    r = client.get("/api/pinned")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch pinned repositories", "details": "connection refused"}


GITHUB_REPO = {
    "id": 1296269,
    "name": "Hello-World",
    "full_name": "octocat/Hello-World",
    "description": "This your first repo!",
    "html_url": "https://github.com/octocat/Hello-World",
    "language": None,
    "stargazers_count": 80,
    "forks_count": 9,
    "private": False,
    "owner": {"login": "octocat"},
}


def test_list_repos(make_client):
    def handler(request):
        assert request.url.path == "/user/repos"
        assert request.url.params["per_page"] == "100"
        assert request.url.params["sort"] == "updated"
        assert request.headers["authorization"] == "Bearer gho_secret"
        return httpx.Response(200, json=[GITHUB_REPO])

    client = make_client(github_handler=handler, cookies={"token": "gho_secret"})
    r = client.get("/api/repos")
    assert r.status_code == 200
    assert r.json() == [
        {
            "id": 1296269,
            "name": "Hello-World",
            "full_name": "octocat/Hello-World",
            "description": "This your first repo!",
            "html_url": "https://github.com/octocat/Hello-World",
            "language": None,
            "stargazers_count": 80,
            "forks_count": 9,
            "topics": [],
        }
    ]


@pytest.mark.parametrize("status", [401, 403, 500])
def test_list_repos_github_error(make_client, status):
    client = make_client(
        github_handler=lambda request: httpx.Response(status, json={"message": "Bad credentials"}),
        cookies={"token": "gho_secret"},
    )
    r = client.get("/api/repos")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch repositories", "details": f"GitHub API error: {status}"}


def test_list_repos_requires_token(make_client):
    r = make_client(cookies={"user": "octocat"}).get("/api/repos")
    assert r.status_code == 401


def test_github_user_passes_token_when_signed_in(make_client):
    def handler(request):
        assert request.url.path == "/users/octocat"
        assert request.headers["authorization"] == "Bearer gho_secret"
        return httpx.Response(200, json={"login": "octocat", "public_repos": 8})

    client = make_client(github_handler=handler, cookies={"token": "gho_secret"})
    r = client.get("/api/github/user/octocat")
    assert r.status_code == 200
    assert r.json() == {"login": "octocat", "public_repos": 8}


def test_github_user_is_public(make_client):
    def handler(request):
        assert "authorization" not in request.headers
        return httpx.Response(200, json={"login": "octocat"})

    assert make_client(github_handler=handler).get("/api/github/user/octocat").json() == {"login": "octocat"}


def test_github_user_keeps_upstream_status(make_client):
    client = make_client(github_handler=lambda request: httpx.Response(404, json={"message": "Not Found"}))
    r = client.get("/api/github/user/ghost")
    assert r.status_code == 404
    assert r.json() == {"error": "Failed to fetch user"}


def test_github_orgs_merges_details(make_client):
    def handler(request):
        if request.url.path == "/users/octocat/orgs":
            return httpx.Response(200, json=[{"login": "github", "id": 9919}, {"login": "broken", "id": 1}])
        if request.url.path == "/orgs/github":
            return httpx.Response(200, json={"login": "github", "name": "GitHub", "blog": "https://github.blog"})
        assert request.url.path == "/orgs/broken"
        return httpx.Response(500, json={"message": "oops"})

    r = make_client(github_handler=handler).get("/api/github/orgs/octocat")
    assert r.status_code == 200
    assert r.json() == [
        {"login": "github", "id": 9919, "name": "GitHub", "blog": "https://github.blog"},
        {"login": "broken", "id": 1},
    ]


def test_github_orgs_error(make_client):
    client = make_client(github_handler=lambda request: httpx.Response(403, json={"message": "rate limited"}))
    r = client.get("/api/github/orgs/octocat")
    assert r.status_code == 403
    assert r.json()["error"] == "Failed to fetch organizations"


def test_github_topics_ranked_by_frequency(make_client):
    repos = [
        {"topics": ["python", "cli"]},
        {"topics": ["rust", "cli"]},
        {"topics": None},
        {"topics": ["cli", "python", "web"]},
        {},
    ] + [{"topics": [f"t{i}"]} for i in range(10)]

    def handler(request):
        assert request.url.path == "/users/octocat/repos"
        assert request.url.params["per_page"] == "100"
        return httpx.Response(200, json=repos)

    r = make_client(github_handler=handler).get("/api/github/topics/octocat")
    assert r.status_code == 200
    topics = r.json()
    assert len(topics) == 10
    assert topics[:4] == ["cli", "python", "rust", "web"]


def test_github_readme(make_client):
    def handler(request):
        assert request.url.host == "raw.githubusercontent.com"
        assert request.url.path == "/octocat/octocat/main/README.md"
        return httpx.Response(200, text="# Hi there")

    r = make_client(github_handler=handler).get("/api/github/readme/octocat")
    assert r.status_code == 200
    assert r.text == "# Hi there"
    assert r.headers["content-type"].startswith("text/markdown")


def test_github_readme_missing_is_404(make_client):
    r = make_client(github_handler=lambda request: httpx.Response(404, text="404: Not Found")).get(
        "/api/github/readme/nobody"
    )
    assert r.status_code == 404
    assert r.json() == {"error": "README not found"}
