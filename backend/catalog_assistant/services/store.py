"""
Product Store

The only component that talks to PostgreSQL. Vector search uses the pgvector
cosine distance operator (<=>) through pgvector.sqlalchemy.

Each operation opens its own AsyncSession, so concurrent requests never share a
session. Order creation runs inside a single transaction: either the order
header and all of its lines are committed, or nothing is.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_assistant.core.database import get_session_factory
from catalog_assistant.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UpstreamError,
)
from catalog_assistant.models.order import QuoteOrder, QuoteOrderLine
from catalog_assistant.models.product import Product
from catalog_assistant.services.models import (
    CatalogProduct,
    OrderStatus,
    ProductData,
    ProductMatch,
    QuoteOrderDraft,
    QuoteOrderRecord,
    dump_spec_map,
    parse_spec_map,
)

logger = logging.getLogger(__name__)


class ProductStore(ABC):
    """Catalog reads, catalog sync writes and quote order persistence."""

    @abstractmethod
    async def similarity_search(self, vector: list[float], k: int) -> list[ProductMatch]:
        """k nearest active, in-stock products by cosine distance, nearest first."""
        ...

    @abstractmethod
    async def insert_order(self, draft: QuoteOrderDraft) -> QuoteOrderRecord:
        """Persist an order header and its lines atomically."""
        ...

    @abstractmethod
    async def upsert_product_with_embedding(
        self,
        data: ProductData,
        vector: list[float],
        replace: bool = False,
    ) -> CatalogProduct:
        """
        Insert a product with its embedding.

        Raises ConflictError when the SKU exists, unless replace is set, in which
        case the existing row is overwritten.
        """
        ...

    @abstractmethod
    async def get_product_by_sku(self, sku: str) -> CatalogProduct:
        ...

    @abstractmethod
    async def check_stock(self, product_id: int) -> int:
        ...

    @abstractmethod
    async def update_product_embedding(self, sku: str, vector: list[float]) -> CatalogProduct:
        ...


def to_catalog_product(row: Product) -> CatalogProduct:
    return CatalogProduct(
        id=row.id,
        sku=row.sku,
        name=row.nombre,
        brand=row.marca,
        description=row.descripcion,
        price=row.precio_lista,
        stock=row.stock_actual,
        specs=parse_spec_map(row.especificaciones_tecnicas),
        active=row.es_activo,
        category_id=row.categoria_id,
        unit=row.unidad_medida,
    )


def _apply_product_data(row: Product, data: ProductData) -> None:
    row.categoria_id = data.categoria_id
    row.nombre = data.nombre
    row.marca = data.marca
    row.descripcion = data.descripcion
    row.precio_lista = data.precio_lista
    row.stock_actual = data.stock_actual
    row.unidad_medida = data.unidad_medida
    row.especificaciones_tecnicas = dump_spec_map(data.spec_map())
    row.es_activo = data.es_activo


class SqlProductStore(ProductStore):
    """ProductStore backed by async SQLAlchemy + pgvector."""

    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory = session_factory or get_session_factory()

    @asynccontextmanager
    async def _session(self, action: str):
        """Open a session and translate driver and connection failures into UpstreamError."""
        try:
            async with self._session_factory() as session:
                yield session
        except IntegrityError:
            raise
        except DBAPIError as e:
            logger.error("[Store] Database unavailable while trying to %s: %s", action, e)
            raise UpstreamError(f"Database error while trying to {action}") from e
        except (OSError, asyncio.TimeoutError) as e:
            # asyncpg raises these unwrapped when the server cannot be reached
            logger.error("[Store] Database unreachable while trying to %s: %s", action, e)
            raise UpstreamError(f"Database unreachable while trying to {action}") from e

    async def similarity_search(self, vector: list[float], k: int) -> list[ProductMatch]:
        distance = Product.embedding.cosine_distance(vector).label("distance")
        stmt = (
            select(Product, distance)
            .where(
                Product.es_activo.is_(True),
                Product.stock_actual > 0,
                Product.embedding.is_not(None),
            )
            .order_by(distance, Product.id)
            .limit(k)
        )
        async with self._session("search products") as session:
            result = await session.execute(stmt)
            rows = result.all()
        return [ProductMatch(to_catalog_product(row), float(dist)) for row, dist in rows]

    async def insert_order(self, draft: QuoteOrderDraft) -> QuoteOrderRecord:
        if not draft.lines:
            raise InternalError("Refusing to persist a quote order without lines")

        try:
            async with self._session("create quote order") as session:
                async with session.begin():
                    order = QuoteOrder(
                        usuario_id=draft.user_id,
                        monto_total=draft.total,
                        estado=OrderStatus.COTIZACION.value,
                    )
                    order.detalles = [
                        QuoteOrderLine(
                            producto_id=line.product_id,
                            cantidad=line.quantity,
                            precio_unitario=line.unit_price,
                        )
                        for line in draft.lines
                    ]
                    session.add(order)
                    await session.flush()
        except IntegrityError as e:
            logger.error("[Store] Quote order rejected by the database: %s", e)
            raise InternalError("Quote order violates a database constraint") from e
        except SQLAlchemyError as e:
            logger.error("[Store] Failed to create quote order: %s", e)
            raise InternalError("Failed to create quote order") from e

        logger.info("[Store] Quote order %s saved with %d lines", order.id, len(draft.lines))
        return QuoteOrderRecord(
            id=order.id,
            user_id=order.usuario_id,
            lines=draft.lines,
            total=order.monto_total,
            status=OrderStatus(order.estado),
            created_at=order.fecha_creacion,
        )

    async def upsert_product_with_embedding(
        self,
        data: ProductData,
        vector: list[float],
        replace: bool = False,
    ) -> CatalogProduct:
        try:
            async with self._session("save product") as session:
                async with session.begin():
                    row = await self._find_by_sku(session, data.sku)
                    if row is not None and not replace:
                        raise ConflictError(f"Ya existe un producto con el SKU {data.sku}")
                    if row is None:
                        row = Product(sku=data.sku)
                        session.add(row)
                    _apply_product_data(row, data)
                    row.embedding = vector
                    await session.flush()
        except IntegrityError as e:
            # Another writer inserted the same SKU between our read and our insert
            raise ConflictError(f"Ya existe un producto con el SKU {data.sku}") from e

        return to_catalog_product(row)

    async def get_product_by_sku(self, sku: str) -> CatalogProduct:
        async with self._session("look up product") as session:
            row = await self._find_by_sku(session, sku, active_only=True)
        if row is None:
            raise NotFoundError(f"Producto no encontrado: {sku}")
        return to_catalog_product(row)

    async def check_stock(self, product_id: int) -> int:
        async with self._session("check stock") as session:
            result = await session.execute(
                select(Product.stock_actual).where(Product.id == product_id)
            )
            stock = result.scalar_one_or_none()
        if stock is None:
            raise NotFoundError(f"Producto no encontrado: {product_id}")
        return stock

    async def update_product_embedding(self, sku: str, vector: list[float]) -> CatalogProduct:
        async with self._session("update embedding") as session:
            async with session.begin():
                result = await session.execute(
                    update(Product)
                    .where(Product.sku == sku)
                    .values(embedding=vector)
                    .returning(Product)
                )
                row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Producto no encontrado: {sku}")
        return to_catalog_product(row)

    @staticmethod
    async def _find_by_sku(
        session: AsyncSession,
        sku: str,
        active_only: bool = False,
    ) -> Product | None:
        stmt = select(Product).where(Product.sku == sku)
        if active_only:
            stmt = stmt.where(Product.es_activo.is_(True))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


# ── Singleton ─────────────────────────────────────────────────────────────────

_store: ProductStore | None = None


def get_product_store() -> ProductStore:
    """Get or create the product store singleton."""
    global _store
    if _store is None:
        _store = SqlProductStore()
    return _store
