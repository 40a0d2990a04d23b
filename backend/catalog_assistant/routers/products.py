"""
Products Router

Catalog sync (embedding + upsert), embedding refresh and lookup by SKU.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from catalog_assistant.core.errors import ValidationError
from catalog_assistant.services.catalog_sync import CatalogSync
from catalog_assistant.services.models import CatalogProduct, ProductData
from catalog_assistant.services.rag.embeddings import get_embedding_provider
from catalog_assistant.services.store import ProductStore, get_product_store

router = APIRouter()


# Schemas
class ProductResponse(BaseModel):
    id: int
    sku: str
    name: str
    brand: str
    description: str
    price: Decimal
    stock: int
    unit: str
    specs: dict


class UpdateEmbeddingRequest(BaseModel):
    sku: str


class SyncResponse(BaseModel):
    success: bool = True
    message: str
    product: ProductResponse


def to_response(product: CatalogProduct) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        sku=product.sku,
        name=product.name,
        brand=product.brand,
        description=product.description,
        price=product.price,
        stock=product.stock,
        unit=product.unit,
        specs={key: value.to_json() for key, value in product.specs.items()},
    )


# Dependency
def get_catalog_sync() -> CatalogSync:
    return CatalogSync(get_embedding_provider(), get_product_store())


# Endpoints
@router.post("/sync", response_model=SyncResponse, status_code=status.HTTP_201_CREATED)
async def sync_product(
    data: ProductData,
    replace: bool = False,
    sync: CatalogSync = Depends(get_catalog_sync),
):
    """Generate the product's embedding and save it to the catalog."""
    product = await sync.sync_product(data, replace=replace)
    return SyncResponse(
        message="Producto sincronizado exitosamente",
        product=to_response(product),
    )


@router.post("/update-embedding", response_model=SyncResponse)
async def update_embedding(
    data: UpdateEmbeddingRequest,
    sync: CatalogSync = Depends(get_catalog_sync),
):
    """Regenerate the embedding of an existing product without touching its other columns."""
    sku = data.sku.strip()
    if not sku:
        raise ValidationError("El campo sku es requerido")

    product = await sync.refresh_embedding(sku)
    return SyncResponse(
        message="Embedding actualizado exitosamente",
        product=to_response(product),
    )


@router.get("/{sku}", response_model=ProductResponse)
async def get_product(
    sku: str,
    store: ProductStore = Depends(get_product_store),
):
    """Look up an active product by SKU."""
    return to_response(await store.get_product_by_sku(sku))
