"""
Catalog Sync

Loads catalog products into PostgreSQL together with their embeddings so they
become retrievable by the chat pipeline.

How it works:
1. TEXT   – build_product_text() renders name, brand, description and
            specifications into one descriptive sentence block
2. EMBED  – the embedding provider turns that text into a vector
            (the same model later embeds user queries, so they are comparable)
3. STORE  – the product row and its vector are written in one transaction;
            an existing SKU is a conflict unless --replace is given

Usage:
    cd backend
    python -m catalog_assistant.services.catalog_sync            # seed catalog
    python -m catalog_assistant.services.catalog_sync --replace  # overwrite rows from the seed
    python -m catalog_assistant.services.catalog_sync --refresh-embeddings  # vectors only
"""

import argparse
import asyncio
import logging
from decimal import Decimal

from catalog_assistant.core.config import get_settings
from catalog_assistant.core.database import dispose_engine
from catalog_assistant.core.errors import CatalogAssistantError, ConflictError, NotFoundError
from catalog_assistant.core.logging import configure_logging
from catalog_assistant.services.models import CatalogProduct, ProductData
from catalog_assistant.services.rag.context import build_product_text
from catalog_assistant.services.rag.embeddings import EmbeddingProvider, get_embedding_provider
from catalog_assistant.services.store import ProductStore, get_product_store

logger = logging.getLogger(__name__)


# ── Seed catalog ─────────────────────────────────────────────────────────────

SEED_CATALOG: list[ProductData] = [
    ProductData(
        categoria_id=1,
        sku="SUP-BS2-OEPW",
        nombre="BioStation 2 Lector de Huella Exterior",
        marca="Suprema",
        descripcion=(
            "Terminal biométrica IP para control de acceso y asistencia. "
            "Ultra rápido y apto para exterior."
        ),
        precio_lista=Decimal("15500.00"),
        stock_actual=45,
        especificaciones_tecnicas={
            "tipo_sensor": "Optico OP5",
            "capacidad_usuarios": 500000,
            "conectividad": ["TCP/IP", "WiFi", "RS485"],
            "proteccion_ip": "IP65 (Exterior)",
            "poe": True,
        },
    ),
    ProductData(
        categoria_id=2,
        sku="HID-1326-LMSMV",
        nombre="Tarjeta Clamshell ProxCard II",
        marca="HID Global",
        descripcion="Tarjeta de control de acceso de proximidad estándar. Durable y económica.",
        precio_lista=Decimal("65.50"),
        stock_actual=5000,
        especificaciones_tecnicas={
            "frecuencia": "125 kHz",
            "material": "ABS",
            "formato": "26 bits Wiegand",
            "rango_lectura": "Hasta 60 cm",
            "imprimible": False,
        },
    ),
    ProductData(
        categoria_id=2,
        sku="FAR-DTC1250E",
        nombre="Impresora Fargo DTC1250e Doble Cara",
        marca="HID Fargo",
        descripcion=(
            "La solución ideal de impresión de tarjetas para pequeñas empresas, "
            "escuelas y gobiernos locales."
        ),
        precio_lista=Decimal("28900.00"),
        stock_actual=12,
        especificaciones_tecnicas={
            "tecnologia": "Sublimación de tinta",
            "resolucion": "300 dpi",
            "velocidad": "16 segundos por tarjeta a color",
            "interfaz": "USB 2.0",
            "laminacion": False,
        },
    ),
    ProductData(
        categoria_id=3,
        sku="SIA-CETNET-500",
        nombre="Licencia Software CET.NET Edición Professional",
        marca="SIASA",
        descripcion=(
            "Software administrativo para control de asistencia, incidencias y nómina. "
            "Versión hasta 500 empleados."
        ),
        precio_lista=Decimal("8500.00"),
        stock_actual=999,
        unidad_medida="licencia",
        especificaciones_tecnicas={
            "compatibilidad_os": ["Windows 10", "Windows 11", "Server 2019"],
            "base_datos": ["SQL Server", "Firebird"],
            "modulos": ["Nómina", "Horarios Rotativos", "Vacaciones"],
            "tipo_licencia": "Digital / Perpetua",
        },
    ),
    ProductData(
        categoria_id=1,
        sku="ZK-TS2000",
        nombre="Torniquete Trípode TS2000 Pro",
        marca="ZKTeco",
        descripcion=(
            "Torniquete trípode de acero inoxidable con función de caída de brazo "
            "para emergencias."
        ),
        precio_lista=Decimal("12400.00"),
        stock_actual=8,
        especificaciones_tecnicas={
            "material": "Acero Inoxidable SUS304",
            "flujo_personas": "30 por minuto",
            "alimentacion": "110V/220V AC",
            "uso": "Interior / Exterior protegido",
            "mecanismo": "Semi-automático",
        },
    ),
]


def product_text_from_data(data: ProductData) -> str:
    """Embedding text for a sync payload (not yet persisted, so no id)."""
    return build_product_text(
        CatalogProduct(
            id=0,
            sku=data.sku,
            name=data.nombre,
            brand=data.marca,
            description=data.descripcion,
            price=data.precio_lista,
            stock=data.stock_actual,
            specs=data.spec_map(),
        )
    )


class CatalogSync:
    """Embeds product descriptions and writes them through the product store."""

    def __init__(self, embeddings: EmbeddingProvider, store: ProductStore):
        self.embeddings = embeddings
        self.store = store

    async def sync_product(self, data: ProductData, replace: bool = False) -> CatalogProduct:
        """
        Embed and save one product.

        Raises:
            ConflictError: the SKU already exists and replace is False
            UpstreamError: embedding or database failure
        """
        text = product_text_from_data(data)
        logger.info("[Sync] Syncing product %s: %s...", data.sku, text[:100])
        vector = await self.embeddings.embed(text)
        product = await self.store.upsert_product_with_embedding(data, vector, replace=replace)
        logger.info("[Sync] Product %s saved (id=%s)", product.sku, product.id)
        return product

    async def refresh_embedding(self, sku: str) -> CatalogProduct:
        """
        Regenerate the embedding of an existing product from its stored data.

        Price, stock and every other column are left untouched.

        Raises:
            NotFoundError: no active product has this SKU
            UpstreamError: embedding or database failure
        """
        current = await self.store.get_product_by_sku(sku)
        vector = await self.embeddings.embed(build_product_text(current))
        product = await self.store.update_product_embedding(sku, vector)
        logger.info("[Sync] Embedding of %s refreshed", sku)
        return product

    async def refresh_catalog(self, skus: list[str]) -> dict[str, str]:
        """
        Refresh the embeddings of many existing products.

        Returns:
            SKU -> "refreshed" | "missing" | "error: <message>"
        """
        results: dict[str, str] = {}
        for i, sku in enumerate(skus, start=1):
            logger.info("[Sync] [%d/%d] Refreshing %s", i, len(skus), sku)
            try:
                await self.refresh_embedding(sku)
                results[sku] = "refreshed"
            except NotFoundError:
                logger.warning("[Sync] %s not found, skipped", sku)
                results[sku] = "missing"
            except CatalogAssistantError as e:
                logger.error("[Sync] %s failed: %s", sku, e.message)
                results[sku] = f"error: {e.message}"
        return results

    async def sync_catalog(
        self,
        products: list[ProductData],
        replace: bool = False,
    ) -> dict[str, str]:
        """
        Sync many products, continuing past per-product failures.

        Returns:
            SKU -> "synced" | "exists" | "error: <message>"
        """
        results: dict[str, str] = {}
        for i, data in enumerate(products, start=1):
            logger.info("[Sync] [%d/%d] %s", i, len(products), data.nombre)
            try:
                await self.sync_product(data, replace=replace)
                results[data.sku] = "synced"
            except ConflictError:
                logger.warning("[Sync] %s already exists, skipped", data.sku)
                results[data.sku] = "exists"
            except CatalogAssistantError as e:
                logger.error("[Sync] %s failed: %s", data.sku, e.message)
                results[data.sku] = f"error: {e.message}"
        return results


# ── Main ─────────────────────────────────────────────────────────────────────

async def run_sync(
    replace: bool = False,
    refresh_embeddings: bool = False,
    sync: CatalogSync | None = None,
) -> dict[str, str]:
    """
    Sync the seed catalog with the production collaborators.

    With refresh_embeddings only the vectors of rows that already exist are
    regenerated; their price and stock are kept.
    """
    sync = sync or CatalogSync(get_embedding_provider(), get_product_store())
    try:
        if refresh_embeddings:
            results = await sync.refresh_catalog([data.sku for data in SEED_CATALOG])
        else:
            results = await sync.sync_catalog(SEED_CATALOG, replace=replace)
    finally:
        await dispose_engine()

    done = sum(1 for status in results.values() if status in ("synced", "refreshed"))
    logger.info("[Sync] Completed: %d/%d products processed", done, len(results))
    return results


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Sync the seed catalog with embeddings")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--replace",
        action="store_true",
        help="overwrite existing products (price and stock included) from the seed catalog",
    )
    mode.add_argument(
        "--refresh-embeddings",
        action="store_true",
        help="only regenerate the embeddings of products that already exist",
    )
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    asyncio.run(
        run_sync(replace=args.replace, refresh_embeddings=args.refresh_embeddings)
    )


if __name__ == "__main__":
    main()
