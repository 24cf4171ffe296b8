"""FastAPI dependency injection: pipeline configuration built from Settings."""
from __future__ import annotations

from pathlib import Path

from labelsplit.core.settings import get_settings
from labelsplit.pdf.classifier import ClassificationRules
from labelsplit.pdf.policies import CropConfig
from labelsplit.pipeline.config import crop_config_from_settings, rules_from_settings


def get_crop_config() -> CropConfig:
    """Return the default crop geometry configured for this deployment."""
    return crop_config_from_settings(get_settings())


def get_classification_rules() -> ClassificationRules:
    """Return the keyword table and minimum-content guard."""
    return rules_from_settings(get_settings())


def get_output_root() -> Path:
    return Path(get_settings().output_dir)
