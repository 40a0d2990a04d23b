"""
Quote Extractor

Turns a quote request like "Cotízame 10 tarjetas HID, 5 lectores biométricos"
into (product hint, quantity) candidates.

Primary pass: a left-to-right scan for non-overlapping spans of
<integer><whitespace><run of letters and spaces>. Each accepted span becomes a
candidate; rejected spans (quantity 0, hint of two letters or fewer) are skipped
and scanning resumes after the rejected span.

Fallback pass: only when the primary pass yields nothing, the first category
keyword found in the message becomes a single candidate with quantity 1.
"""

import re
from dataclasses import dataclass
from typing import Iterator

from catalog_assistant.services.models import QuoteLineCandidate

# [^\W\d_] is "any letter", accented ones included
QUANTITY_SPAN = re.compile(r"(\d+)\s+([^\W\d_]+(?:[ \t]+[^\W\d_]+)*)")

CATEGORY_KEYWORDS = re.compile(
    r"(lector|impresora|tarjeta|software|torniquete|biom[eé]trico|credencial)",
    re.IGNORECASE,
)

MIN_HINT_LENGTH = 3


@dataclass(frozen=True)
class QuantitySpan:
    start: int
    end: int
    quantity: int
    hint: str


def scan_quantity_spans(message: str) -> Iterator[QuantitySpan]:
    """Yield every <quantity> <words> span, left to right, without overlaps."""
    for match in QUANTITY_SPAN.finditer(message):
        yield QuantitySpan(
            start=match.start(),
            end=match.end(),
            quantity=int(match.group(1)),
            hint=match.group(2).strip().lower(),
        )


def extract_quote_items(message: str) -> list[QuoteLineCandidate]:
    """
    Extract quote candidates from a message.

    An empty list means the message could not be parsed and the caller should
    ask the user to restate the request; it is not an error.
    """
    items = [
        QuoteLineCandidate(product_hint=span.hint, quantity=span.quantity)
        for span in scan_quantity_spans(message)
        if span.quantity > 0 and len(span.hint) >= MIN_HINT_LENGTH
    ]
    if items:
        return items

    # At most one fallback candidate, even with several keywords present
    keyword = CATEGORY_KEYWORDS.search(message)
    if keyword:
        return [QuoteLineCandidate(product_hint=keyword.group(1).lower(), quantity=1)]

    return []
