"""
Domain types shared by the chat pipeline, the product store and catalog sync.

These are plain, immutable values: the store maps ORM rows into them and the
pipeline never touches a database session directly.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

CENTS = Decimal("0.01")

Scalar = Union[str, int, float, bool]


def to_money(value: Any) -> Decimal:
    """Coerce a price-like value into a Decimal rounded to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


# ── Intents ──────────────────────────────────────────────────────────────────

class IntentLabel(str, Enum):
    QUOTE_REQUEST = "quote_request"
    TECHNICAL_QUERY = "technical_query"
    PRODUCT_SEARCH = "product_search"
    GENERAL_QUERY = "general_query"


@dataclass(frozen=True)
class Intent:
    label: IntentLabel
    confidence: float


# ── Technical specifications ─────────────────────────────────────────────────

def _render_scalar(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ScalarSpec:
    value: Scalar

    def render(self) -> str:
        return _render_scalar(self.value)

    def to_json(self) -> Scalar:
        return self.value


@dataclass(frozen=True)
class ListSpec:
    values: tuple[Scalar, ...]

    def render(self, delimiter: str = ", ") -> str:
        return delimiter.join(_render_scalar(v) for v in self.values)

    def to_json(self) -> list[Scalar]:
        return list(self.values)


SpecValue = Union[ScalarSpec, ListSpec]


def parse_spec_value(raw: Any) -> SpecValue:
    if isinstance(raw, (list, tuple)):
        return ListSpec(tuple(_coerce_scalar(v) for v in raw))
    return ScalarSpec(_coerce_scalar(raw))


def _coerce_scalar(raw: Any) -> Scalar:
    if isinstance(raw, (str, int, float, bool)):
        return raw
    if raw is None:
        return ""
    # Nested objects are flattened to their string form
    return str(raw)


def parse_spec_map(raw: dict | None) -> dict[str, SpecValue]:
    """Convert a JSON specification object into tagged spec values."""
    return {str(key): parse_spec_value(value) for key, value in (raw or {}).items()}


def dump_spec_map(specs: dict[str, SpecValue]) -> dict[str, Any]:
    return {key: value.to_json() for key, value in specs.items()}


def render_spec_map(
    specs: dict[str, SpecValue],
    template: str = "{key}: {value}",
    separator: str = "\n",
) -> str:
    return separator.join(
        template.format(key=key, value=value.render()) for key, value in specs.items()
    )


# ── Catalog ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CatalogProduct:
    id: int
    sku: str
    name: str
    brand: str
    description: str
    price: Decimal
    stock: int
    specs: dict[str, SpecValue] = field(default_factory=dict)
    active: bool = True
    category_id: int | None = None
    unit: str = "pieza"


@dataclass(frozen=True)
class ProductMatch:
    """A catalog product together with its cosine distance to the query."""

    product: CatalogProduct
    distance: float

    @property
    def relevance(self) -> float:
        return max(-1.0, min(1.0, 1.0 - self.distance))


class ProductData(BaseModel):
    """Catalog payload accepted by the sync path (field names follow the catalog tables)."""

    sku: str = Field(min_length=1, max_length=64)
    nombre: str = Field(min_length=1, max_length=255)
    marca: str = ""
    descripcion: str = ""
    precio_lista: Decimal = Field(gt=0)
    stock_actual: int = Field(default=0, ge=0)
    unidad_medida: str = "pieza"
    categoria_id: int | None = None
    especificaciones_tecnicas: dict[str, Any] = Field(default_factory=dict)
    es_activo: bool = True

    def spec_map(self) -> dict[str, SpecValue]:
        return parse_spec_map(self.especificaciones_tecnicas)


# ── Quotes ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QuoteLineCandidate:
    product_hint: str
    quantity: int


class LineStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_STOCK = "insufficient_stock"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolvedQuoteLine:
    candidate: QuoteLineCandidate
    status: LineStatus
    product: CatalogProduct | None = None

    @property
    def quantity(self) -> int:
        return self.candidate.quantity

    @property
    def unit_price(self) -> Decimal | None:
        return self.product.price if self.product is not None else None

    @property
    def subtotal(self) -> Decimal | None:
        if self.product is None:
            return None
        return to_money(self.product.price * self.candidate.quantity)


class OrderStatus(str, Enum):
    COTIZACION = "cotizacion"


@dataclass(frozen=True)
class OrderLineDraft:
    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class QuoteOrderDraft:
    user_id: uuid.UUID
    lines: tuple[OrderLineDraft, ...]

    @property
    def total(self) -> Decimal:
        return to_money(sum((line.subtotal for line in self.lines), Decimal("0")))


@dataclass(frozen=True)
class QuoteOrderRecord:
    id: uuid.UUID
    user_id: uuid.UUID
    lines: tuple[OrderLineDraft, ...]
    total: Decimal
    status: OrderStatus
    created_at: datetime


@dataclass(frozen=True)
class QuoteOutcome:
    order: QuoteOrderRecord | None
    summary: str
    lines: tuple[ResolvedQuoteLine, ...]
