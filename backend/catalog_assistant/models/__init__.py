from catalog_assistant.models.product import Product
from catalog_assistant.models.order import QuoteOrder, QuoteOrderLine

__all__ = [
    "Product",
    "QuoteOrder",
    "QuoteOrderLine",
]
