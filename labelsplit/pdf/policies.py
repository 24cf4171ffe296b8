"""Merge policies: how cropped pages are assembled into output documents.

Three variants share one interface (:class:`MergePolicy`):

FixedSplitPolicy
    Every source page yields a label crop and an invoice crop, regardless of
    content.  ``N`` source pages always yield ``2N`` output pages.
ContentGatedPolicy
    Pages are classified first.  Label crops are emitted only for pages
    classified Label/Both, invoice crops only for Invoice/Both.  Neither pages
    are skipped with a reason; if nothing is emitted the whole request fails
    with NoValidPagesError.
PreSplitMergePolicy
    Two already-split documents (labels, invoices) are interleaved pairwise up
    to the shorter one's page count.  Excess pages are dropped unless
    ``strict`` is set, in which case unequal counts raise
    PageCountMismatchError before any page is copied.

Output layout is either ``interleaved`` (one document, label/invoice pairs in
source order) or ``separate`` (a labels document and an invoices document).
Order is always a deterministic function of source page order.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

import fitz  # PyMuPDF

from labelsplit.core.errors import InvalidCropError, NoValidPagesError, PageCountMismatchError
from labelsplit.pdf import cropper
from labelsplit.pdf.classifier import ClassificationRules, classify_page_text
from labelsplit.pdf.document import page_size, page_text
from labelsplit.pdf.geometry import (
    Rectangle,
    RectOverride,
    SplitAxis,
    TargetSize,
    half_page,
)

logger = logging.getLogger(__name__)

ROLES = ("label", "invoice")

TextExtractor = Callable[[fitz.Document, int], str]


class OutputLayout(StrEnum):
    INTERLEAVED = "interleaved"
    SEPARATE = "separate"


@dataclass(frozen=True)
class CropConfig:
    """Immutable crop geometry for both roles.

    ``label``/``invoice`` are explicit rectangles; ``None`` means "the half
    of each page along ``axis``".  Overrides replace individual fields of the
    resolved rectangle per request.
    """

    label: Rectangle | None = None
    invoice: Rectangle | None = None
    axis: SplitAxis = SplitAxis.HORIZONTAL
    target: TargetSize | None = None
    label_override: RectOverride = field(default_factory=RectOverride)
    invoice_override: RectOverride = field(default_factory=RectOverride)

    def rect_for(self, role: str, page_width: float, page_height: float) -> Rectangle:
        base = self.label if role == "label" else self.invoice
        if base is None:
            base = half_page(self.axis, role, page_width, page_height)
        override = self.label_override if role == "label" else self.invoice_override
        return override.apply(base)


@dataclass(frozen=True, slots=True)
class EmittedPage:
    source_index: int
    role: str


@dataclass(frozen=True, slots=True)
class SkippedPage:
    source_index: int
    reason: str


@dataclass
class Assembly:
    """Output of a merge policy run."""

    layout: OutputLayout
    documents: dict[str, fitz.Document]
    emitted: list[EmittedPage] = field(default_factory=list)
    skipped: list[SkippedPage] = field(default_factory=list)
    dropped: int = 0

    @property
    def page_count(self) -> int:
        return sum(doc.page_count for doc in self.documents.values())

    def close(self) -> None:
        for doc in self.documents.values():
            doc.close()


def _new_documents(layout: OutputLayout) -> dict[str, fitz.Document]:
    if layout == OutputLayout.INTERLEAVED:
        return {"merged": fitz.open()}
    return {"labels": fitz.open(), "invoices": fitz.open()}


def _target_for(documents: dict[str, fitz.Document], role: str) -> fitz.Document:
    if "merged" in documents:
        return documents["merged"]
    return documents["labels" if role == "label" else "invoices"]


class MergePolicy:
    """Base class for all merge policies.

    Subclasses override assemble() and declare how many input documents they
    consume via ``input_count``.
    """

    name: str = "base"
    input_count: int = 1

    def __init__(self, layout: OutputLayout = OutputLayout.INTERLEAVED) -> None:
        self.layout = OutputLayout(layout)

    def assemble(self, sources: Sequence[fitz.Document]) -> Assembly:
        raise NotImplementedError(
            f"{type(self).__name__}.assemble() is not implemented"
        )

    def _check_inputs(self, sources: Sequence[fitz.Document]) -> None:
        if len(sources) != self.input_count:
            raise ValueError(
                f"{self.name} policy expects {self.input_count} document(s); "
                f"got {len(sources)}"
            )


class _CroppingPolicy(MergePolicy):
    """Shared crop loop for the single-input policies."""

    def __init__(
        self,
        crops: CropConfig | None = None,
        layout: OutputLayout = OutputLayout.INTERLEAVED,
    ) -> None:
        super().__init__(layout)
        self.crops = crops or CropConfig()

    def roles_for_page(
        self, source: fitz.Document, index: int
    ) -> tuple[tuple[str, ...], str | None]:
        """Return (roles to emit, skip reason)."""
        raise NotImplementedError

    def assemble(self, sources: Sequence[fitz.Document]) -> Assembly:
        self._check_inputs(sources)
        source = sources[0]
        assembly = Assembly(layout=self.layout, documents=_new_documents(self.layout))

        try:
            for index in range(source.page_count):
                roles, reason = self.roles_for_page(source, index)
                if not roles:
                    logger.info("Skipping page %d: %s", index + 1, reason)
                    assembly.skipped.append(SkippedPage(index, reason or "skipped"))
                    continue

                width, height = page_size(source, index)
                for role in roles:
                    rect = self.crops.rect_for(role, width, height)
                    try:
                        cropper.extract(
                            _target_for(assembly.documents, role),
                            source,
                            index,
                            rect,
                            self.crops.target,
                        )
                    except InvalidCropError as exc:
                        raise exc.with_location(role, index) from exc
                    assembly.emitted.append(EmittedPage(index, role))
        except Exception:
            assembly.close()
            raise

        logger.info(
            "%s policy emitted %d pages, skipped %d of %d source pages",
            self.name,
            len(assembly.emitted),
            len(assembly.skipped),
            source.page_count,
        )
        return assembly


class FixedSplitPolicy(_CroppingPolicy):
    name = "fixed_split"

    def roles_for_page(self, source, index):
        return ROLES, None


class ContentGatedPolicy(_CroppingPolicy):
    name = "content_gated"

    def __init__(
        self,
        crops: CropConfig | None = None,
        rules: ClassificationRules | None = None,
        layout: OutputLayout = OutputLayout.INTERLEAVED,
        text_extractor: TextExtractor = page_text,
    ) -> None:
        super().__init__(crops, layout)
        self.rules = rules or ClassificationRules()
        self.text_extractor = text_extractor

    def roles_for_page(self, source, index):
        verdict = classify_page_text(self.text_extractor(source, index), self.rules)
        logger.debug("Page %d classified as %s", index + 1, verdict.classification)
        roles = tuple(
            role
            for role, wanted in (
                ("label", verdict.classification.has_label),
                ("invoice", verdict.classification.has_invoice),
            )
            if wanted
        )
        return roles, verdict.reason

    def assemble(self, sources: Sequence[fitz.Document]) -> Assembly:
        assembly = super().assemble(sources)
        if not assembly.emitted:
            assembly.close()
            raise NoValidPagesError(
                [(page.source_index, page.reason) for page in assembly.skipped]
            )
        return assembly


class PreSplitMergePolicy(MergePolicy):
    name = "pre_split_merge"
    input_count = 2

    def __init__(self, strict: bool = False) -> None:
        super().__init__(OutputLayout.INTERLEAVED)
        self.strict = strict

    def assemble(self, sources: Sequence[fitz.Document]) -> Assembly:
        self._check_inputs(sources)
        labels, invoices = sources
        if self.strict and labels.page_count != invoices.page_count:
            raise PageCountMismatchError(labels.page_count, invoices.page_count)

        pairs = min(labels.page_count, invoices.page_count)
        dropped = max(labels.page_count, invoices.page_count) - pairs
        if dropped:
            logger.warning(
                "Page counts differ (labels=%d, invoices=%d); dropping %d unpaired pages",
                labels.page_count,
                invoices.page_count,
                dropped,
            )

        assembly = Assembly(layout=self.layout, documents=_new_documents(self.layout))
        merged = assembly.documents["merged"]
        try:
            for index in range(pairs):
                merged.insert_pdf(labels, from_page=index, to_page=index)
                assembly.emitted.append(EmittedPage(index, "label"))
                merged.insert_pdf(invoices, from_page=index, to_page=index)
                assembly.emitted.append(EmittedPage(index, "invoice"))
        except Exception:
            assembly.close()
            raise

        assembly.dropped = dropped
        return assembly


POLICIES: dict[str, type[MergePolicy]] = {
    FixedSplitPolicy.name: FixedSplitPolicy,
    ContentGatedPolicy.name: ContentGatedPolicy,
    PreSplitMergePolicy.name: PreSplitMergePolicy,
}
