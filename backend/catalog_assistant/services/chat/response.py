"""
Response Composer

Shapes pipeline results into the outward chat result:
    { response, products?, quote? }

`products` is only filled for non-quote intents and `quote` only when an order
was persisted. No business logic lives here.
"""

import uuid
from decimal import Decimal

from pydantic import BaseModel

from catalog_assistant.services.models import LineStatus, ProductMatch, QuoteOutcome


class ProductSummary(BaseModel):
    id: int
    sku: str
    name: str
    brand: str
    price: Decimal
    stock: int
    distance: float
    relevance: float


class QuoteItemSummary(BaseModel):
    sku: str
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class QuoteSummary(BaseModel):
    order_id: uuid.UUID
    items: list[QuoteItemSummary]
    total: Decimal


class ChatResult(BaseModel):
    response: str
    products: list[ProductSummary] | None = None
    quote: QuoteSummary | None = None


def summarize_product(match: ProductMatch) -> ProductSummary:
    p = match.product
    return ProductSummary(
        id=p.id,
        sku=p.sku,
        name=p.name,
        brand=p.brand,
        price=p.price,
        stock=p.stock,
        distance=match.distance,
        relevance=round(match.relevance, 4),
    )


def compose_answer(answer: str, matches: list[ProductMatch]) -> ChatResult:
    """Result for technical, product-search and general questions."""
    return ChatResult(
        response=answer,
        products=[summarize_product(m) for m in matches],
    )


def compose_quote(outcome: QuoteOutcome) -> ChatResult:
    """Result for quote requests; `quote` is set only when an order exists."""
    if outcome.order is None:
        return ChatResult(response=outcome.summary)

    items = [
        QuoteItemSummary(
            sku=line.product.sku,
            name=line.product.name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )
        for line in outcome.lines
        if line.status is LineStatus.OK
    ]
    return ChatResult(
        response=outcome.summary,
        quote=QuoteSummary(
            order_id=outcome.order.id,
            items=items,
            total=outcome.order.total,
        ),
    )


def compose_message(text: str) -> ChatResult:
    """Plain text result, e.g. a request for clarification."""
    return ChatResult(response=text)
