"""
Context Assembler

Formats retrieved products into the product-context block that is injected into
the generation prompt, and renders the descriptive text used to embed a product.
"""

from catalog_assistant.services.models import CatalogProduct, ProductMatch, render_spec_map

NO_PRODUCTS_CONTEXT = "No se encontraron productos relevantes en el catálogo."

BLOCK_SEPARATOR = "\n---\n"


def _format_block(index: int, match: ProductMatch) -> str:
    p = match.product
    specs_text = render_spec_map(p.specs, template="  - {key}: {value}")
    return (
        f"PRODUCTO {index}:\n"
        f"- SKU: {p.sku}\n"
        f"- Nombre: {p.name}\n"
        f"- Marca: {p.brand}\n"
        f"- Descripción: {p.description}\n"
        f"- Precio: ${p.price:.2f}\n"
        f"- Stock: {p.stock} unidades\n"
        f"- Especificaciones:\n"
        f"{specs_text}\n"
        f"- Relevancia: {match.relevance:.2f}"
    )


def assemble_context(matches: list[ProductMatch]) -> str:
    """One formatted block per product, in similarity order."""
    if not matches:
        return NO_PRODUCTS_CONTEXT
    return BLOCK_SEPARATOR.join(
        _format_block(i, match) for i, match in enumerate(matches, start=1)
    )


def build_product_text(product: CatalogProduct) -> str:
    """Descriptive text of a product, used as embedding input during sync."""
    specs_text = render_spec_map(product.specs, separator=". ")
    return (
        f"{product.name}. Marca: {product.brand}. {product.description.rstrip('.')}. "
        f"Especificaciones: {specs_text}"
    )
