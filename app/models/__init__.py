from app.models.db_models import KVEntry  # noqa: F401
