"""GET /outputs/{output_id}/{filename}: download a stored output PDF."""
from __future__ import annotations

from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from labelsplit.api.deps import get_output_root

router = APIRouter(prefix="/outputs", tags=["outputs"])

_OUTPUT_FILENAMES = frozenset({"merged.pdf", "labels.pdf", "invoices.pdf"})


@router.get("/{output_id}/{filename}", summary="Download an output PDF")
def download_output(
    output_id: UUID,
    filename: str,
    output_root: Path = Depends(get_output_root),
):
    if filename not in _OUTPUT_FILENAMES:
        raise HTTPException(status_code=404, detail="Output file not found")

    path = output_root / str(output_id) / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Output file not found")

    return FileResponse(path=str(path), media_type="application/pdf", filename=filename)
