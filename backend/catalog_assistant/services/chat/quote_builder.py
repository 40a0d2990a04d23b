"""
Quote Order Builder

Resolves extracted (hint, quantity) candidates against the catalog and persists
a priced quote order.

For every candidate, in input order:
1. Retrieve the single closest product for the hint.
2. No product  -> line is not_found, noted in the summary.
3. Not enough stock (re-read from the store) -> line is insufficient_stock,
   excluded from the order.
4. Otherwise -> line is ok, subtotal = quantity x list price.

An order is persisted only when at least one line is ok. Line failures are
statuses, not errors; only store failures abort the quote.
"""

import asyncio
import logging
import uuid
from dataclasses import replace as dc_replace
from typing import Sequence

from catalog_assistant.core.errors import NotFoundError
from catalog_assistant.services.models import (
    LineStatus,
    OrderLineDraft,
    QuoteLineCandidate,
    QuoteOrderDraft,
    QuoteOrderRecord,
    QuoteOutcome,
    ResolvedQuoteLine,
)
from catalog_assistant.services.rag.retriever import RetrievalEngine
from catalog_assistant.services.store import ProductStore

logger = logging.getLogger(__name__)

SUMMARY_HEADER = "📋 **COTIZACIÓN**\n\n"
NO_ORDER_FOOTER = (
    "No se pudo generar la cotización. Por favor, verifica los productos solicitados."
)
ORDER_FOOTER = "Para proceder con el pedido, contacta a tu ejecutivo de cuenta."


def format_line(line: ResolvedQuoteLine) -> str:
    if line.status is LineStatus.NOT_FOUND:
        return (
            f"❌ No encontré productos que coincidan con: "
            f"\"{line.candidate.product_hint}\"\n\n"
        )

    product = line.product
    if line.status is LineStatus.INSUFFICIENT_STOCK:
        return (
            f"⚠️ **{product.name}** (SKU: {product.sku})\n"
            f"   Stock insuficiente. Disponible: {product.stock}, "
            f"Solicitado: {line.quantity}\n\n"
        )

    return (
        f"✓ **{product.name}** (SKU: {product.sku})\n"
        f"   Marca: {product.brand}\n"
        f"   Cantidad: {line.quantity}\n"
        f"   Precio unitario: ${line.unit_price:.2f}\n"
        f"   Subtotal: ${line.subtotal:.2f}\n\n"
    )


def format_summary(
    lines: Sequence[ResolvedQuoteLine],
    order: QuoteOrderRecord | None,
) -> str:
    """Human-readable quote summary, one entry per line in input order."""
    text = SUMMARY_HEADER + "".join(format_line(line) for line in lines)
    if order is None:
        return text + NO_ORDER_FOOTER
    return (
        text
        + f"**TOTAL: ${order.total:.2f}**\n\n"
        + f"Cotización guardada con ID: {order.id}\n"
        + ORDER_FOOTER
    )


class QuoteOrderBuilder:
    """Resolves quote candidates and persists the resulting order."""

    def __init__(
        self,
        retrieval: RetrievalEngine,
        store: ProductStore,
        concurrency: int = 1,
    ):
        self.retrieval = retrieval
        self.store = store
        self.concurrency = max(1, concurrency)

    async def resolve_line(self, candidate: QuoteLineCandidate) -> ResolvedQuoteLine:
        matches = await self.retrieval.search(candidate.product_hint, k=1)
        if not matches:
            logger.info("[Quote] No match for hint: %s", candidate.product_hint)
            return ResolvedQuoteLine(candidate, LineStatus.NOT_FOUND)

        product = matches[0].product
        if product.stock >= candidate.quantity:
            # Confirm against the live row before the line is accepted
            try:
                available = await self.store.check_stock(product.id)
            except NotFoundError:
                logger.info("[Quote] %s disappeared before it could be quoted", product.sku)
                return ResolvedQuoteLine(candidate, LineStatus.NOT_FOUND)
            if available != product.stock:
                product = dc_replace(product, stock=available)

        if product.stock < candidate.quantity:
            logger.info(
                "[Quote] Insufficient stock for %s: available=%d requested=%d",
                product.sku,
                product.stock,
                candidate.quantity,
            )
            return ResolvedQuoteLine(candidate, LineStatus.INSUFFICIENT_STOCK, product)

        return ResolvedQuoteLine(candidate, LineStatus.OK, product)

    async def resolve_lines(
        self,
        candidates: Sequence[QuoteLineCandidate],
    ) -> list[ResolvedQuoteLine]:
        """Resolve every candidate; the result always follows input order."""
        if self.concurrency == 1:
            return [await self.resolve_line(candidate) for candidate in candidates]

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(candidate: QuoteLineCandidate) -> ResolvedQuoteLine:
            async with semaphore:
                return await self.resolve_line(candidate)

        tasks = [asyncio.ensure_future(bounded(c)) for c in candidates]
        try:
            # gather() returns results in argument order regardless of completion order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def build_quote(
        self,
        user_id: uuid.UUID,
        candidates: Sequence[QuoteLineCandidate],
    ) -> QuoteOutcome:
        """
        Resolve candidates and persist a quote order when anything is quotable.

        Args:
            user_id: Owner of the quote
            candidates: Output of extract_quote_items(), in message order

        Returns:
            QuoteOutcome with the persisted order (or None), the summary text and
            every resolved line
        """
        lines = await self.resolve_lines(candidates)
        ok_lines = [line for line in lines if line.status is LineStatus.OK]

        order = None
        if ok_lines:
            draft = QuoteOrderDraft(
                user_id=user_id,
                lines=tuple(
                    OrderLineDraft(
                        product_id=line.product.id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    )
                    for line in ok_lines
                ),
            )
            order = await self.store.insert_order(draft)
            logger.info("[Quote] Order %s created, total=%s", order.id, order.total)
        else:
            logger.info("[Quote] No quotable lines out of %d candidates", len(lines))

        return QuoteOutcome(
            order=order,
            summary=format_summary(lines, order),
            lines=tuple(lines),
        )
