"""Tests for labelsplit/pdf/classifier.py.

Pure text-in, verdict-out tests; no PDF files required.

Default keyword table:
  label   : "ordered through", "ship to", "deliver to", "label"
  invoice : "tax invoice", "fssai license number", "declaration", "invoice"
  min_text_length = 20
"""
from __future__ import annotations

from itertools import permutations

import pytest

from labelsplit.pdf.classifier import (
    Classification,
    ClassificationRules,
    classify_page_text,
    classify_text,
)

LABEL_TEXT = "ordered through meesho customer address soni singh kanpur"
INVOICE_TEXT = "tax invoice original for recipient gstin 09abcde1234f1z5"


# ---------------------------------------------------------------------------
# Keyword matching
# ---------------------------------------------------------------------------

def test_label_keyword_classifies_as_label():
    assert classify_text(LABEL_TEXT) == Classification.LABEL


def test_invoice_keyword_classifies_as_invoice():
    assert classify_text(INVOICE_TEXT) == Classification.INVOICE


def test_both_keyword_sets_classify_as_both():
    assert classify_text(f"{LABEL_TEXT} {INVOICE_TEXT}") == Classification.BOTH


def test_no_keyword_is_neither_with_reason():
    verdict = classify_page_text("quarterly newsletter for our valued readers")
    assert verdict.classification == Classification.NEITHER
    assert verdict.reason == "no keyword match"


def test_matching_is_case_insensitive():
    assert classify_text("TAX INVOICE for order number 4411") == Classification.INVOICE


@pytest.mark.parametrize("keyword", ["fssai license number", "declaration"])
def test_secondary_invoice_keywords(keyword: str):
    assert classify_text(f"page footer with {keyword} printed") == Classification.INVOICE


def test_literal_word_label_is_a_label():
    assert classify_text("return shipping label attached here") == Classification.LABEL


# ---------------------------------------------------------------------------
# Minimum-content guard
# ---------------------------------------------------------------------------

def test_empty_text_is_neither():
    verdict = classify_page_text("")
    assert verdict.classification == Classification.NEITHER
    assert "insufficient text" in verdict.reason


def test_short_text_with_keyword_is_still_neither():
    # "invoice" is a keyword but 7 chars < 20
    verdict = classify_page_text("invoice")
    assert verdict.classification == Classification.NEITHER
    assert verdict.reason == "insufficient text (7 < 20 chars)"


def test_threshold_boundary():
    rules = ClassificationRules.build(["label"], ["invoice"], min_text_length=10)
    assert classify_text("invoice 1", rules) == Classification.NEITHER   # 9 chars
    assert classify_text("invoice 12", rules) == Classification.INVOICE  # 10 chars


def test_none_text_is_treated_as_empty():
    assert classify_text(None) == Classification.NEITHER  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Rules as data
# ---------------------------------------------------------------------------

def test_custom_keywords_replace_defaults():
    rules = ClassificationRules.build(["awb number"], ["bill of supply"], min_text_length=5)
    assert classify_text("awb number 123456789", rules) == Classification.LABEL
    assert classify_text("bill of supply no 44", rules) == Classification.INVOICE
    assert classify_text(INVOICE_TEXT, rules) == Classification.NEITHER


def test_custom_keywords_are_normalised():
    rules = ClassificationRules.build(["  Ship Via  ", ""], ["GST Bill"], min_text_length=0)
    assert rules.keywords["label"] == frozenset({"ship via"})
    assert classify_text("ship via bluedart", rules) == Classification.LABEL


def test_result_is_independent_of_keyword_order():
    label_words = ["ordered through", "ship to", "label"]
    invoice_words = ["tax invoice", "declaration", "invoice"]
    texts = [LABEL_TEXT, INVOICE_TEXT, f"{LABEL_TEXT} {INVOICE_TEXT}", "nothing relevant in this one"]

    expected = [classify_text(t, ClassificationRules.build(label_words, invoice_words)) for t in texts]
    for label_order in permutations(label_words):
        for invoice_order in permutations(invoice_words):
            rules = ClassificationRules.build(label_order, invoice_order)
            assert [classify_text(t, rules) for t in texts] == expected


def test_rules_are_immutable():
    rules = ClassificationRules()
    with pytest.raises(TypeError):
        rules.keywords["label"] = frozenset({"x"})  # type: ignore[index]


def test_classification_role_flags():
    assert Classification.BOTH.has_label and Classification.BOTH.has_invoice
    assert Classification.LABEL.has_label and not Classification.LABEL.has_invoice
    assert Classification.INVOICE.has_invoice and not Classification.INVOICE.has_label
    assert not (Classification.NEITHER.has_label or Classification.NEITHER.has_invoice)
