"""Page classifier: decide whether a page carries a label, an invoice, or both.

Keyword rules are data (a role → substring set mapping), not control flow.
A page "is a label" iff its lower-cased text contains any label keyword and
"is an invoice" iff it contains any invoice keyword.  Pages whose text is
shorter than ``min_text_length`` are always ``Neither`` so blank or
near-blank pages are never emitted.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

DEFAULT_LABEL_KEYWORDS: frozenset[str] = frozenset({
    "ordered through",
    "ship to",
    "deliver to",
    "label",
})

DEFAULT_INVOICE_KEYWORDS: frozenset[str] = frozenset({
    "tax invoice",
    "fssai license number",
    "declaration",
    "invoice",
})

DEFAULT_MIN_TEXT_LENGTH = 20


class Classification(StrEnum):
    LABEL = "label"
    INVOICE = "invoice"
    BOTH = "both"
    NEITHER = "neither"

    @property
    def has_label(self) -> bool:
        return self in (Classification.LABEL, Classification.BOTH)

    @property
    def has_invoice(self) -> bool:
        return self in (Classification.INVOICE, Classification.BOTH)


def _normalise(keywords: Iterable[str]) -> frozenset[str]:
    return frozenset(k.strip().lower() for k in keywords if k and k.strip())


@dataclass(frozen=True)
class ClassificationRules:
    """Immutable keyword table plus the minimum-content guard."""

    keywords: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({
            "label": DEFAULT_LABEL_KEYWORDS,
            "invoice": DEFAULT_INVOICE_KEYWORDS,
        })
    )
    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH

    @classmethod
    def build(
        cls,
        label_keywords: Iterable[str],
        invoice_keywords: Iterable[str],
        min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
    ) -> ClassificationRules:
        return cls(
            keywords=MappingProxyType({
                "label": _normalise(label_keywords),
                "invoice": _normalise(invoice_keywords),
            }),
            min_text_length=min_text_length,
        )

    def matches(self, role: str, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords.get(role, ()))


@dataclass(frozen=True, slots=True)
class PageVerdict:
    classification: Classification
    reason: str | None = None


def classify_page_text(text: str, rules: ClassificationRules | None = None) -> PageVerdict:
    """Classify one page's extracted text and explain a ``Neither`` result."""
    rules = rules or ClassificationRules()
    text = (text or "").lower()

    if len(text) < rules.min_text_length:
        return PageVerdict(
            Classification.NEITHER,
            f"insufficient text ({len(text)} < {rules.min_text_length} chars)",
        )

    is_label = rules.matches("label", text)
    is_invoice = rules.matches("invoice", text)

    if is_label and is_invoice:
        return PageVerdict(Classification.BOTH)
    if is_label:
        return PageVerdict(Classification.LABEL)
    if is_invoice:
        return PageVerdict(Classification.INVOICE)
    return PageVerdict(Classification.NEITHER, "no keyword match")


def classify_text(text: str, rules: ClassificationRules | None = None) -> Classification:
    return classify_page_text(text, rules).classification
