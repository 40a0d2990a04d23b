import asyncio
from decimal import Decimal

import pytest

from catalog_assistant.core.errors import InternalError, NotFoundError, UpstreamError
from catalog_assistant.services.chat.quote_builder import QuoteOrderBuilder
from catalog_assistant.services.models import LineStatus, QuoteLineCandidate
from catalog_assistant.services.rag.retriever import RetrievalEngine
from tests.fakes import HashingEmbeddingProvider, InMemoryProductStore


def make_builder(embeddings, store, concurrency=1):
    return QuoteOrderBuilder(RetrievalEngine(embeddings, store), store, concurrency=concurrency)


async def test_single_ok_line_persists_order(embeddings, seeded_store, user_id):
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(
        user_id, [QuoteLineCandidate("tarjetas hid proxcard ii", 10)]
    )

    assert [line.status for line in outcome.lines] == [LineStatus.OK]
    line = outcome.lines[0]
    assert line.product.sku == "HID-1326-LMSMV"
    assert line.unit_price == Decimal("65.50")
    assert line.subtotal == Decimal("655.00")

    assert outcome.order is not None
    assert outcome.order.total == Decimal("655.00")
    assert outcome.order.user_id == user_id
    assert seeded_store.orders == [outcome.order]
    assert "**TOTAL: $655.00**" in outcome.summary
    assert f"Cotización guardada con ID: {outcome.order.id}" in outcome.summary


async def test_insufficient_stock_line_is_excluded(embeddings, seeded_store, user_id):
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(
        user_id,
        [
            QuoteLineCandidate("tarjetas proxcard", 10),
            QuoteLineCandidate("torniquetes tripode", 20),
        ],
    )

    assert [line.status for line in outcome.lines] == [
        LineStatus.OK,
        LineStatus.INSUFFICIENT_STOCK,
    ]
    assert outcome.order.total == Decimal("655.00")
    assert len(outcome.order.lines) == 1
    assert "Stock insuficiente. Disponible: 8, Solicitado: 20" in outcome.summary


async def test_total_is_sum_of_ok_subtotals(embeddings, seeded_store, user_id):
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(
        user_id,
        [
            QuoteLineCandidate("tarjetas proxcard", 10),
            QuoteLineCandidate("torniquetes tripode", 2),
            QuoteLineCandidate("lectores biométricos", 1000),
        ],
    )

    ok_lines = [line for line in outcome.lines if line.status is LineStatus.OK]
    expected = sum(line.unit_price * line.quantity for line in ok_lines)
    assert outcome.order.total == expected == Decimal("25455.00")
    assert sum(line.subtotal for line in outcome.order.lines) == outcome.order.total


async def test_no_ok_lines_means_no_order(embeddings, seeded_store, user_id):
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(
        user_id, [QuoteLineCandidate("torniquetes tripode", 500)]
    )

    assert outcome.order is None
    assert seeded_store.orders == []
    assert outcome.summary.endswith(
        "No se pudo generar la cotización. Por favor, verifica los productos solicitados."
    )


async def test_not_found_does_not_block_other_lines(user_id):
    embeddings = HashingEmbeddingProvider()
    store = InMemoryProductStore()
    builder = make_builder(embeddings, store)

    outcome = await builder.build_quote(user_id, [QuoteLineCandidate("lectores", 2)])

    assert outcome.lines[0].status is LineStatus.NOT_FOUND
    assert outcome.lines[0].product is None
    assert outcome.lines[0].subtotal is None
    assert outcome.order is None
    assert 'No encontré productos que coincidan con: "lectores"' in outcome.summary


async def test_store_failure_aborts_the_quote(embeddings, seeded_store, user_id):
    seeded_store.fail_on_insert = True
    builder = make_builder(embeddings, seeded_store)

    with pytest.raises(InternalError):
        await builder.build_quote(user_id, [QuoteLineCandidate("tarjetas proxcard", 1)])
    assert seeded_store.orders == []


async def test_concurrent_resolution_keeps_input_order(seeded_store, user_id):
    # The first candidate resolves last
    slow = HashingEmbeddingProvider(delays={"tarjetas proxcard": 0.05, "torniquetes tripode": 0.02})
    builder = make_builder(slow, seeded_store, concurrency=3)
    candidates = [
        QuoteLineCandidate("tarjetas proxcard", 1),
        QuoteLineCandidate("torniquetes tripode", 1),
        QuoteLineCandidate("impresora fargo", 1),
    ]

    outcome = await builder.build_quote(user_id, candidates)

    assert [line.candidate for line in outcome.lines] == candidates
    assert [line.product.sku for line in outcome.lines] == [
        "HID-1326-LMSMV",
        "ZK-TS2000",
        "FAR-DTC1250E",
    ]
    summary = outcome.summary
    assert summary.index("HID-1326-LMSMV") < summary.index("ZK-TS2000") < summary.index("FAR-DTC1250E")


async def test_identical_requests_create_distinct_orders(embeddings, seeded_store, user_id):
    builder = make_builder(embeddings, seeded_store)
    candidates = [QuoteLineCandidate("tarjetas proxcard", 10)]

    first = await builder.build_quote(user_id, candidates)
    second = await builder.build_quote(user_id, candidates)

    assert first.order.id != second.order.id
    assert len(seeded_store.orders) == 2


async def test_stock_is_rechecked_before_accepting_a_line(embeddings, seeded_store, user_id):
    # Search still sees 5000 units; the live read does not
    async def live_stock(product_id):
        return 3

    seeded_store.check_stock = live_stock
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(user_id, [QuoteLineCandidate("tarjetas proxcard", 10)])

    assert outcome.lines[0].status is LineStatus.INSUFFICIENT_STOCK
    assert outcome.lines[0].product.stock == 3
    assert outcome.order is None
    assert "Stock insuficiente. Disponible: 3, Solicitado: 10" in outcome.summary


async def test_product_removed_before_quote_is_not_found(embeddings, seeded_store, user_id):
    async def gone(product_id):
        raise NotFoundError(f"Producto no encontrado: {product_id}")

    seeded_store.check_stock = gone
    builder = make_builder(embeddings, seeded_store)

    outcome = await builder.build_quote(user_id, [QuoteLineCandidate("tarjetas proxcard", 10)])

    assert outcome.lines[0].status is LineStatus.NOT_FOUND
    assert seeded_store.orders == []


async def test_failed_line_cancels_the_other_lookups(seeded_store, user_id):
    class FailingEmbeddings(HashingEmbeddingProvider):
        def __init__(self):
            super().__init__(delays={"torniquetes tripode": 0.2})
            self.completed = []

        async def embed(self, text):
            if text == "drones":
                raise UpstreamError("Embedding provider error: unavailable")
            vector = await super().embed(text)
            self.completed.append(text)
            return vector

    embeddings = FailingEmbeddings()
    builder = make_builder(embeddings, seeded_store, concurrency=3)

    with pytest.raises(UpstreamError):
        await builder.build_quote(
            user_id,
            [QuoteLineCandidate("torniquetes tripode", 1), QuoteLineCandidate("drones", 1)],
        )

    await asyncio.sleep(0.3)
    assert "torniquetes tripode" not in embeddings.completed
    assert seeded_store.orders == []
