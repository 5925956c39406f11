# File: civicvoice/routers/uploads.py
# Project: civicvoice-backend

from fastapi import APIRouter, Depends, File, UploadFile
from typing import List
from civicvoice.core.config import settings
from civicvoice.core.deps import get_evidence_store
from civicvoice.core.errors import ValidationError
from civicvoice.core.security import get_current_principal
from civicvoice.services.authz import Principal
from civicvoice.services.storage import ALLOWED_CONTENT_TYPES, MAX_UPLOAD_BYTES, EvidenceStore, make_object_key

router = APIRouter(prefix="/uploads", tags=["uploads"])

@router.post("/multiple", status_code=201)
def upload_multiple(
    files: List[UploadFile] = File(default=[]),
    store: EvidenceStore = Depends(get_evidence_store),
    principal: Principal = Depends(get_current_principal),
):
    files = [f for f in files if f.filename]
    if not files:
        raise ValidationError("No files uploaded", field="files")
    if len(files) > settings.max_evidence_files:
        raise ValidationError(f"At most {settings.max_evidence_files} files per upload", field="files")

    out = []
    for f in files:
        if f.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only .jpg, .jpeg, .png, .pdf and .mp4 files are allowed", field="files")
        data = f.file.read(MAX_UPLOAD_BYTES + 1)
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationError(f"{f.filename} is larger than 50 MB", field="files")
        url = store.upload(data, f.content_type, make_object_key(principal.id, f.filename, f.content_type))
        out.append({"url": url, "filename": f.filename, "size": len(data), "mimetype": f.content_type})
    return {"files": out}
