"""Build the immutable pipeline configuration from Settings."""
from __future__ import annotations

from dataclasses import replace

from labelsplit.core.settings import Settings
from labelsplit.pdf.classifier import ClassificationRules
from labelsplit.pdf.geometry import Rectangle, RectOverride, SplitAxis, TargetSize
from labelsplit.pdf.policies import CropConfig


def crop_config_from_settings(settings: Settings) -> CropConfig:
    return CropConfig(
        label=Rectangle.from_list(settings.label_crop) if settings.label_crop else None,
        invoice=Rectangle.from_list(settings.invoice_crop) if settings.invoice_crop else None,
        axis=SplitAxis(settings.split_axis),
        target=TargetSize(*settings.target_size) if settings.target_size else None,
    )


def rules_from_settings(settings: Settings) -> ClassificationRules:
    return ClassificationRules.build(
        settings.label_keywords,
        settings.invoice_keywords,
        min_text_length=settings.min_text_length,
    )


def with_request_overrides(
    base: CropConfig,
    label: RectOverride | None = None,
    invoice: RectOverride | None = None,
    target: TargetSize | None = None,
) -> CropConfig:
    """Return a copy of *base* carrying per-request overrides."""
    changes: dict[str, object] = {}
    if label is not None and not label.is_empty():
        changes["label_override"] = label
    if invoice is not None and not invoice.is_empty():
        changes["invoice_override"] = invoice
    if target is not None:
        changes["target"] = target
    return replace(base, **changes) if changes else base
