import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from catalog_assistant.core.errors import UpstreamError
from catalog_assistant.main import app
from catalog_assistant.routers.products import get_catalog_sync
from catalog_assistant.services.catalog_sync import SEED_CATALOG
from catalog_assistant.services.chat.service import ChatService, get_chat_service
from catalog_assistant.services.store import get_product_store


@pytest.fixture
def client(embeddings, store, chat_model, catalog_sync):
    app.dependency_overrides[get_chat_service] = lambda: ChatService(
        embeddings, store, chat_model, max_products=5
    )
    app.dependency_overrides[get_catalog_sync] = lambda: catalog_sync
    app.dependency_overrides[get_product_store] = lambda: store
    with TestClient(app) as test_client:
        for data in SEED_CATALOG:
            seeded = test_client.post("/products/sync", json=data.model_dump(mode="json"))
            assert seeded.status_code == 201
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_quote_message(client, user_id):
    response = client.post(
        "/chat/message",
        json={"userId": str(user_id), "message": "  Cotízame 10 tarjetas HID ProxCard II "},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "products" not in body
    assert Decimal(str(body["quote"]["total"])) == Decimal("655.00")
    assert body["quote"]["items"][0]["sku"] == "HID-1326-LMSMV"


def test_rag_message_lists_products(client, user_id):
    response = client.post(
        "/chat/message",
        json={"userId": str(user_id), "message": "Busco un lector para exterior"},
    )

    assert response.status_code == 200
    body = response.json()
    assert "quote" not in body
    assert len(body["products"]) == 5


def test_blank_message_is_rejected(client, user_id):
    response = client.post("/chat/message", json={"userId": str(user_id), "message": "   "})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["path"] == "/chat/message"


def test_missing_user_id_is_rejected(client):
    response = client.post("/chat/message", json={"message": "hola"})
    assert response.status_code == 422


def test_sync_new_product(client):
    payload = {
        "sku": "HID-ICLASS-2000",
        "nombre": "Tarjeta iCLASS",
        "marca": "HID Global",
        "descripcion": "Tarjeta inteligente 13.56 MHz",
        "precio_lista": "120.00",
        "stock_actual": 300,
        "especificaciones_tecnicas": {"frecuencia": "13.56 MHz", "memoria": ["2k", "16k"]},
    }

    response = client.post("/products/sync", json=payload)

    assert response.status_code == 201
    product = response.json()["product"]
    assert product["sku"] == "HID-ICLASS-2000"
    assert product["specs"]["memoria"] == ["2k", "16k"]


def test_sync_duplicate_sku_conflicts(client):
    payload = SEED_CATALOG[1].model_dump(mode="json")

    response = client.post("/products/sync", json=payload)

    assert response.status_code == 409
    assert response.json()["success"] is False


def test_get_product_by_sku(client):
    response = client.get("/products/ZK-TS2000")

    assert response.status_code == 200
    assert response.json()["name"] == "Torniquete Trípode TS2000 Pro"


def test_unknown_sku_is_not_found(client):
    response = client.get(f"/products/{uuid.uuid4()}")
    assert response.status_code == 404


def test_update_embedding_keeps_product_data(client, store):
    store.set_stock("FAR-DTC1250E", 4)

    response = client.post("/products/update-embedding", json={"sku": "FAR-DTC1250E"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Embedding actualizado exitosamente"
    assert body["product"]["stock"] == 4


def test_update_embedding_of_unknown_sku(client):
    response = client.post("/products/update-embedding", json={"sku": "NOPE-000"})

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_update_embedding_requires_sku(client):
    response = client.post("/products/update-embedding", json={"sku": "  "})
    assert response.status_code == 400


def test_store_outage_uses_error_body(client, store):
    async def unreachable(data, vector, replace=False):
        raise UpstreamError("Database unreachable while trying to save product")

    store.upsert_product_with_embedding = unreachable

    response = client.post("/products/sync", json=SEED_CATALOG[0].model_dump(mode="json"))

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Database unreachable while trying to save product"
    assert body["path"] == "/products/sync"
