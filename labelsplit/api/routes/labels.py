"""Label/invoice split and merge routes.

POST /split           fixed split of every page into label + invoice crops
POST /classify-split  content-gated split driven by page text keywords
POST /merge           pairwise merge of a labels PDF and an invoices PDF

Interleaved results come back as a PDF download; separate results come back
as JSON with download URLs under /outputs.  Uploads are spooled to temp
files that are always removed before the response is sent.
"""
from __future__ import annotations

import logging
import tempfile
from typing import Any
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from labelsplit.api.deps import get_classification_rules, get_crop_config, get_output_root
from labelsplit.core.settings import get_settings
from labelsplit.pdf.classifier import ClassificationRules
from labelsplit.pdf.geometry import RectOverride, TargetSize
from labelsplit.pdf.policies import CropConfig, MergePolicy, OutputLayout
from labelsplit.pipeline.config import with_request_overrides
from labelsplit.pipeline.runner import RunResult, build_policy, run_policy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["labels"])

MERGED_DOWNLOAD_NAME = "Thermal_Labels_Merged.pdf"


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

class CropForm:
    """Multipart form fields shared by the split routes.

    All overrides are optional; absent fields fall back to the configured
    crop geometry.  Non-numeric values fail request validation (HTTP 422)
    and are never replaced by defaults.
    """

    def __init__(
        self,
        layout: OutputLayout = Form(OutputLayout.INTERLEAVED),
        label_x: float | None = Form(None, alias="labelX"),
        label_y: float | None = Form(None, alias="labelY"),
        label_width: float | None = Form(None, alias="labelWidth"),
        label_height: float | None = Form(None, alias="labelHeight"),
        invoice_x: float | None = Form(None, alias="invoiceX"),
        invoice_y: float | None = Form(None, alias="invoiceY"),
        invoice_width: float | None = Form(None, alias="invoiceWidth"),
        invoice_height: float | None = Form(None, alias="invoiceHeight"),
        target_width: float | None = Form(None, alias="targetWidth"),
        target_height: float | None = Form(None, alias="targetHeight"),
    ) -> None:
        self.layout = layout
        self.label = RectOverride(label_x, label_y, label_width, label_height)
        self.invoice = RectOverride(invoice_x, invoice_y, invoice_width, invoice_height)
        self.target_width = target_width
        self.target_height = target_height

    def target(self) -> TargetSize | None:
        if self.target_width is None and self.target_height is None:
            return None
        if self.target_width is None or self.target_height is None:
            raise HTTPException(
                status_code=422,
                detail="targetWidth and targetHeight must be given together",
            )
        try:
            return TargetSize(self.target_width, self.target_height)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

    def apply(self, base: CropConfig) -> CropConfig:
        return with_request_overrides(base, self.label, self.invoice, self.target())


async def _spool_upload(upload: UploadFile) -> Path:
    """Write *upload* to a temp file and return its path."""
    settings = get_settings()
    max_bytes = settings.upload_max_file_size_mb * 1024 * 1024

    filename = upload.filename or "unknown"
    if Path(filename).suffix.lower() != ".pdf":
        raise HTTPException(status_code=400, detail=f"Please upload a PDF file; got {filename!r}")

    content = await upload.read()
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File {filename!r} exceeds {settings.upload_max_file_size_mb}MB limit",
        )

    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".pdf")
    try:
        tmp.write(content)
    finally:
        tmp.close()
    return Path(tmp.name)


async def _run(policy: MergePolicy, uploads: list[UploadFile], output_root: Path) -> RunResult:
    paths: list[Path] = []
    try:
        for upload in uploads:
            paths.append(await _spool_upload(upload))
        return await run_in_threadpool(run_policy, policy, paths, output_root)
    finally:
        for path in paths:
            path.unlink(missing_ok=True)


def _respond(request: Request, result: RunResult) -> FileResponse | dict[str, Any]:
    headers = {
        "X-Output-Id": result.output_id,
        "X-Pages-Emitted": str(len(result.emitted)),
        "X-Pages-Skipped": str(len(result.skipped)),
    }
    if result.dropped:
        headers["X-Pages-Dropped"] = str(result.dropped)

    merged = result.files.get("merged")
    if merged is not None:
        return FileResponse(
            path=str(merged.path),
            media_type="application/pdf",
            filename=MERGED_DOWNLOAD_NAME,
            headers=headers,
        )

    return {
        "output_id": result.output_id,
        "files": {
            name: {
                "url": str(request.url_for(
                    "download_output", output_id=result.output_id, filename=f.path.name
                )),
                "page_count": f.page_count,
            }
            for name, f in result.files.items()
        },
        "emitted": [
            {"page_index": p.source_index, "role": p.role} for p in result.emitted
        ],
        "skipped": [
            {"page_index": p.source_index, "reason": p.reason} for p in result.skipped
        ],
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/split", summary="Split every page into a label and an invoice page")
async def split_pdf(
    request: Request,
    pdf: UploadFile = File(...),
    form: CropForm = Depends(),
    crops: CropConfig = Depends(get_crop_config),
    output_root: Path = Depends(get_output_root),
):
    policy = build_policy("fixed_split", crops=form.apply(crops), layout=form.layout)
    result = await _run(policy, [pdf], output_root)
    return _respond(request, result)


@router.post("/classify-split", summary="Split pages by detected label/invoice content")
async def classify_split_pdf(
    request: Request,
    pdf: UploadFile = File(...),
    form: CropForm = Depends(),
    crops: CropConfig = Depends(get_crop_config),
    rules: ClassificationRules = Depends(get_classification_rules),
    output_root: Path = Depends(get_output_root),
):
    policy = build_policy(
        "content_gated", crops=form.apply(crops), rules=rules, layout=form.layout
    )
    result = await _run(policy, [pdf], output_root)
    return _respond(request, result)


@router.post("/merge", summary="Interleave a labels PDF with an invoices PDF")
async def merge_pdfs(
    request: Request,
    labels: UploadFile = File(...),
    invoices: UploadFile = File(...),
    strict: bool | None = Form(None),
    output_root: Path = Depends(get_output_root),
):
    if strict is None:
        strict = get_settings().strict_merge
    policy = build_policy("pre_split_merge", strict=strict)
    result = await _run(policy, [labels, invoices], output_root)
    return _respond(request, result)
