"""Category helpers for the menu tabs and the filtered product view."""
from typing import Iterable, List

from praiaflow.domain import Product

ALL_CATEGORIES = 'todas'
DEFAULT_CATEGORY_LABEL = 'Outros'

# Tab order shown on the menu; unknown categories go after these.
PREFERRED_ORDER = [
    ALL_CATEGORIES,
    'guarda-sol',
    'cadeiras de praia',
    'bebidas não alcoólicas',
    'bebidas alcoólicas',
    'para petiscar',
    'pratos',
    'sobremesas',
]


def normalize_category(label) -> str:
    """Case-normalized category key."""
    return (label or '').strip().lower()


def format_category(label) -> str:
    """Display label: lowercase with the first letter capitalized."""
    text = normalize_category(label)
    if not text:
        return DEFAULT_CATEGORY_LABEL
    return text[0].upper() + text[1:]


def list_categories(products: Iterable[Product]) -> List[str]:
    """
    Category keys present in the catalog, ``todas`` first.

    Known categories follow PREFERRED_ORDER, the rest are sorted
    alphabetically. Products without category only show under ``todas``.
    """
    present = {normalize_category(p.category) for p in products}

    ordered = [cat for cat in PREFERRED_ORDER if cat == ALL_CATEGORIES or cat in present]
    extras = sorted(cat for cat in present if cat and cat not in PREFERRED_ORDER)
    return ordered + extras


def filter_products(products: Iterable[Product], category) -> List[Product]:
    """Products of ``category``; every product for the ``todas`` sentinel."""
    key = normalize_category(category)
    if key == ALL_CATEGORIES:
        return list(products)
    return [p for p in products if normalize_category(p.category) == key]
