import importlib.util
from pathlib import Path

from catalog_assistant.core.config import get_settings
from catalog_assistant.models.product import Product

INITIAL_SCHEMA = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_initial_schema.py"


def load_migration(path):
    module_spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_schema_and_model_share_embedding_dimensions():
    migration = load_migration(INITIAL_SCHEMA)

    assert migration.EMBEDDING_DIMENSIONS == Product.__table__.c.embedding.type.dim
    assert migration.EMBEDDING_DIMENSIONS == get_settings().embedding_dimensions
