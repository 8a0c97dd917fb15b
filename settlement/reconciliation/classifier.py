"""
Product Classifier - maps raw option text to a canonical product.

Candidate texts are tried in priority order; for the first text that
mentions any keyword, the earliest catalog product with a match wins.
Matched products are then shown under a short display label taken from a
fixed family table.
"""

from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..config import Settings, get_settings
from ..models import ClassifierResult, ProductPrice

# Keyword families, checked against the product's name and keywords
TURTLE = ("거북이", "turtle", "스노클", "snorkel", "1부", "2부")
SUNSET = ("선셋", "sunset", "3부")
PARASAIL = ("패러", "parasail")
JETSKI = ("제트", "jet")

# Combinations first
DISPLAY_LABELS: Tuple[Tuple[Tuple[Tuple[str, ...], ...], str], ...] = (
    ((TURTLE, PARASAIL), "거북이+패러"),
    ((TURTLE, JETSKI), "거북이+제트"),
    ((PARASAIL, JETSKI), "패러+제트"),
    # sunset products are snorkel tours too
    ((SUNSET,), "3부"),
    ((TURTLE,), "1/2부"),
    ((PARASAIL,), "패러"),
    ((JETSKI,), "제트"),
)


def _has_family(text: str, family: Sequence[str]) -> bool:
    return any(token in text for token in family)


def display_label(product: ProductPrice) -> str:
    """Short label for a catalog product; falls back to its own name."""
    text = " ".join([product.product_name, product.match_keywords]).lower()
    for families, label in DISPLAY_LABELS:
        if all(_has_family(text, family) for family in families):
            return label
    return product.product_name


def find_product(text: str, products: Iterable[ProductPrice]) -> Optional[ProductPrice]:
    """First catalog product with a keyword contained in text."""
    lowered = text.lower()
    for product in products:
        if any(keyword in lowered for keyword in product.keywords):
            return product
    return None


def _raw_texts(text: Union[str, Iterable[str], None]) -> List[str]:
    if text is None:
        return []
    if isinstance(text, str):
        return [text.strip()] if text.strip() else []
    return [t.strip() for t in text if t and t.strip()]


def classify_product(
    text: Union[str, Iterable[str], None],
    products: Sequence[ProductPrice],
    product_name: str = "",
    fallback_texts: Union[str, Iterable[str], None] = None,
    settings: Optional[Settings] = None,
) -> ClassifierResult:
    """
    Classify option text against the catalog.

    Texts are tried one at a time: the options, then the product name, then
    the fallback texts. The first text with any catalog match decides; within
    that text the catalog order decides.

    Args:
        text: Raw option text, or several option texts in priority order
        products: Catalog in priority order
        product_name: Platform product name, searched after the options and
            used as the display fallback for long or missing option text
        fallback_texts: Searched last (e.g. the reservation's own options)

    Returns:
        ClassifierResult; an unknown option is flagged, never raised
    """
    settings = settings or get_settings()
    texts = _raw_texts(text)
    product_name = (product_name or "").strip()
    searched = texts + _raw_texts(product_name) + _raw_texts(fallback_texts)

    for candidate in searched:
        product = find_product(candidate, products)
        if product is not None:
            return ClassifierResult(
                product_name=display_label(product),
                matched_product=product,
            )

    if texts and len(texts[0]) <= settings.classifier_raw_label_max_length:
        label = texts[0]
    else:
        label = product_name

    return ClassifierResult(
        product_name=label,
        matched_product=None,
        is_anomaly=True,
        notes=(f"식별불가 옵션: {', '.join(searched)}",) if searched else (),
    )
