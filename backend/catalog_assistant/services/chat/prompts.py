"""
Prompt Builder

Combines the fixed B2B assistant persona, the retrieved product context and the
user's question into the single prompt sent to the chat model.
"""

SYSTEM_PROMPT = """Eres un asistente virtual especializado en productos de control de acceso, biometría y seguridad para el sector B2B (mayorista).

Tu empresa es un mayorista de tecnología que vende a integradores y distribuidores.

DIRECTRICES:
1. Usa un tono profesional y técnico, pero amigable
2. Siempre menciona SKU, marca y características técnicas relevantes
3. Si recomiendas productos, explica por qué son adecuados para la necesidad del cliente
4. Si un producto no está en stock o no existe, sé honesto
5. Para cotizaciones, proporciona información clara de precios y disponibilidad
6. Recuerda que tus clientes son profesionales del sector (integradores, no usuarios finales)"""

ANSWER_INSTRUCTIONS = [
    "Responde de manera profesional y técnica",
    "Si recomiendas productos, menciona SKU, marca y características clave",
    "Si no hay productos relevantes en el contexto, indícalo claramente",
    "Mantén un tono B2B (mayorista)",
]


def compile_rag_prompt(
    context: str,
    user_message: str,
    system_prompt: str = SYSTEM_PROMPT,
) -> str:
    """
    Build the full generation prompt.

    Args:
        context: Product context produced by assemble_context()
        user_message: The user's original message
        system_prompt: Persona and guidelines (defaults to SYSTEM_PROMPT)

    Returns:
        Prompt string for ChatModel.generate()
    """
    instructions = "\n".join(f"- {line}" for line in ANSWER_INSTRUCTIONS)
    return (
        f"{system_prompt}\n\n"
        f"CONTEXTO DE PRODUCTOS:\n{context}\n\n"
        f"PREGUNTA DEL USUARIO:\n{user_message}\n\n"
        f"INSTRUCCIONES:\n{instructions}"
    )
