import sys

from app.config import load_settings
from app.models.store import build_kv_store
from app.schemas.pinned import PinnedRepository
from app.services.pinned import PinStore


def main():
    if len(sys.argv) < 3:
        print("usage: python -m scripts.seed_pins <username> <repo_id> [<repo_id> ...]")
        sys.exit(1)

    settings = load_settings()
    pin_store = PinStore(build_kv_store(settings), key_prefix=settings.key_prefix)

    username = sys.argv[1]
    for repo_id in sys.argv[2:]:
        repo_id = int(repo_id) if repo_id.isdigit() else repo_id
        pin_store.add(username, PinnedRepository(id=repo_id, name=str(repo_id)))

    pins = pin_store.get(username)
    print(f" {username} has {len(pins)} pinned repos")

if __name__ == "__main__":
    main()
