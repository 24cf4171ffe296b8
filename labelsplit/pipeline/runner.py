"""Run a merge policy end to end: open inputs, assemble, persist outputs.

A run is fail-fast.  Any error while opening, cropping or saving aborts
the run and leaves nothing behind under the output root; output files are
written only after the whole assembly succeeded.
"""
from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from uuid import uuid4

import fitz  # PyMuPDF

from labelsplit.pdf.classifier import ClassificationRules
from labelsplit.pdf.document import open_pdf, save_pdf
from labelsplit.pdf.policies import (
    POLICIES,
    ContentGatedPolicy,
    CropConfig,
    EmittedPage,
    MergePolicy,
    OutputLayout,
    PreSplitMergePolicy,
    SkippedPage,
)

logger = logging.getLogger(__name__)


@dataclass
class OutputFile:
    name: str
    path: Path
    page_count: int


@dataclass
class RunResult:
    output_id: str
    directory: Path
    files: dict[str, OutputFile] = field(default_factory=dict)
    emitted: list[EmittedPage] = field(default_factory=list)
    skipped: list[SkippedPage] = field(default_factory=list)
    dropped: int = 0


def build_policy(
    name: str,
    *,
    crops: CropConfig | None = None,
    rules: ClassificationRules | None = None,
    layout: OutputLayout | str = OutputLayout.INTERLEAVED,
    strict: bool = False,
) -> MergePolicy:
    """Instantiate the merge policy registered under *name*."""
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise KeyError(f"Unknown merge policy: {name!r}") from None

    if policy_cls is PreSplitMergePolicy:
        return PreSplitMergePolicy(strict=strict)
    if policy_cls is ContentGatedPolicy:
        return ContentGatedPolicy(crops, rules, OutputLayout(layout))
    return policy_cls(crops, OutputLayout(layout))


def run_policy(
    policy: MergePolicy,
    inputs: Sequence[bytes | str | Path],
    output_root: str | Path,
    output_id: str | None = None,
) -> RunResult:
    """Open *inputs*, run *policy* over them and save every output document."""
    output_id = output_id or str(uuid4())
    directory = Path(output_root) / output_id

    sources: list[fitz.Document] = []
    try:
        for item in inputs:
            sources.append(open_pdf(item))

        assembly = policy.assemble(sources)
        try:
            result = RunResult(
                output_id=output_id,
                directory=directory,
                emitted=list(assembly.emitted),
                skipped=list(assembly.skipped),
                dropped=assembly.dropped,
            )
            try:
                for name, doc in assembly.documents.items():
                    if doc.page_count == 0:
                        logger.info("Run %s: no %s pages, nothing to write", output_id, name)
                        continue
                    path = save_pdf(doc, directory / f"{name}.pdf")
                    result.files[name] = OutputFile(name, path, doc.page_count)
            except Exception:
                shutil.rmtree(directory, ignore_errors=True)
                raise
        finally:
            assembly.close()
    finally:
        for doc in sources:
            doc.close()

    logger.info(
        "Run %s (%s) wrote %s",
        output_id,
        policy.name,
        ", ".join(f"{f.name}={f.page_count}p" for f in result.files.values()),
    )
    return result
