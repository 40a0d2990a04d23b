import uuid

import pytest

from catalog_assistant.services.catalog_sync import SEED_CATALOG, CatalogSync
from catalog_assistant.services.chat.service import ChatService
from tests.fakes import HashingEmbeddingProvider, InMemoryProductStore, ScriptedChatModel


@pytest.fixture
def embeddings():
    return HashingEmbeddingProvider()


@pytest.fixture
def store():
    return InMemoryProductStore()


@pytest.fixture
def chat_model():
    return ScriptedChatModel()


@pytest.fixture
def catalog_sync(embeddings, store):
    return CatalogSync(embeddings, store)


@pytest.fixture
async def seeded_store(catalog_sync, store):
    await catalog_sync.sync_catalog(SEED_CATALOG)
    return store


@pytest.fixture
def chat_service(embeddings, seeded_store, chat_model):
    return ChatService(embeddings, seeded_store, chat_model, max_products=5)


@pytest.fixture
def user_id():
    return uuid.UUID("3f2b8c1e-6a4d-4e8f-9b1a-2c7d5e9f0a11")
