"""
Product codes — isolated, testable, reusable.

The display code of a product is derived from its free-text attributes.
It identifies the product on screens and in search; the ledger never
depends on it.

Examples:
    - ("Camisa", "azul", "M")      -> "CAMISA AZUL M"
    - ("  bota  de  couro", "", "42") -> "BOTA DE COURO 42"
    - ("Rádio HT", None, None)      -> "RÁDIO HT"
"""

import re

_WHITESPACE = re.compile(r"\s+")


def generate_code(name: str, color: str | None = None, size: str | None = None) -> str:
    """
    Build the display code from product attributes.

    Empty attributes are skipped, the result is uppercased and runs of
    whitespace collapse to a single space.

    Args:
        name: Product name (required)
        color: Optional color
        size: Optional size

    Returns:
        Normalized code string
    """
    parts = [part for part in (name, color, size) if part]
    joined = " ".join(parts).upper()
    return _WHITESPACE.sub(" ", joined).strip()
