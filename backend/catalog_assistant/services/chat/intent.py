"""
Intent Classifier

Labels a user message with one intent using an ordered decision table.

Why a fixed precedence:
- A message like "cotízame 10 lectores con conectividad WiFi" mentions both a
  quantity and a technical term. Commercial intent dominates, so quote patterns
  are always checked before technical ones.
- Each family returns a fixed confidence; there is no dynamic scoring.
"""

import re
from dataclasses import dataclass

from catalog_assistant.services.models import Intent, IntentLabel


@dataclass(frozen=True)
class IntentRule:
    label: IntentLabel
    confidence: float
    patterns: tuple[re.Pattern, ...]

    def matches(self, message: str) -> bool:
        return any(pattern.search(message) for pattern in self.patterns)


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


QUOTE_PATTERNS = _compile(
    r"cot[ií]za(me|r)?",
    r"cu[aá]nto (cuesta|costar[ií]a)",
    r"precio de",
    r"quiero comprar",
    r"necesito \d+",
    r"dame \d+",
    r"\d+\s*(piezas|unidades|licencias)",
)

TECHNICAL_PATTERNS = _compile(
    r"especificaciones",
    r"caracter[ií]sticas",
    r"c[oó]mo funciona",
    r"qu[eé] (es|son)",
    r"para qu[eé] sirve",
    r"compatib(le|ilidad)",
    r"conectividad",
    r"capacidad",
    r"rendimiento",
)

PRODUCT_SEARCH_PATTERNS = _compile(
    r"necesito (un|una)",
    r"busco (un|una)",
    r"recomi[eé]nda(me)?",
    r"qu[eé] productos",
    r"tienes? (algo|alguno)",
    r"para (uso|exterior|interior)",
    r"(lector|impresora|tarjeta|software|torniquete)",
)

# Evaluated top to bottom; the first rule with any matching pattern wins
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(IntentLabel.QUOTE_REQUEST, 0.9, QUOTE_PATTERNS),
    IntentRule(IntentLabel.TECHNICAL_QUERY, 0.85, TECHNICAL_PATTERNS),
    IntentRule(IntentLabel.PRODUCT_SEARCH, 0.8, PRODUCT_SEARCH_PATTERNS),
)

GENERAL_QUERY_CONFIDENCE = 0.5


def classify_intent(
    message: str,
    rules: tuple[IntentRule, ...] = INTENT_RULES,
) -> Intent:
    """
    Classify a message into exactly one intent.

    Args:
        message: Raw user message
        rules: Ordered decision table (defaults to INTENT_RULES)

    Returns:
        The Intent of the first matching rule, or general_query at 0.5
    """
    for rule in rules:
        if rule.matches(message):
            return Intent(rule.label, rule.confidence)
    return Intent(IntentLabel.GENERAL_QUERY, GENERAL_QUERY_CONFIDENCE)
