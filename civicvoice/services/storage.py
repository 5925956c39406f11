# File: civicvoice/services/storage.py
# Project: civicvoice-backend

import base64
import logging
import uuid
from typing import Optional

import requests

log = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
    "video/mp4": "mp4",
}
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class EvidenceStore:
    """Stores evidence files and returns the URL to keep on the issue.

    With Supabase configured the file goes to Storage via REST (bucket must be
    public). Without it the bytes come back as a data URL, which is enough for
    local development.
    """

    def __init__(self, supabase_url: Optional[str], service_role: Optional[str], bucket: str, timeout: int = 30):
        self.supabase_url = (supabase_url or "").rstrip("/") or None
        self.service_role = service_role
        self.bucket = bucket
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.supabase_url and self.service_role)

    def upload(self, data: bytes, content_type: str, path: str) -> str:
        if not self.configured:
            b64 = base64.b64encode(data).decode("utf-8")
            return f"data:{content_type};base64,{b64}"
        url = f"{self.supabase_url}/storage/v1/object/{self.bucket}/{path}"
        r = requests.post(url, headers={
            "Authorization": f"Bearer {self.service_role}",
            "Content-Type": content_type,
            "x-upsert": "true",
        }, data=data, timeout=self.timeout)
        r.raise_for_status()
        log.info("uploaded evidence %s (%d bytes)", path, len(data))
        return f"{self.supabase_url}/storage/v1/object/public/{self.bucket}/{path}"


def make_object_key(folder: str, filename: Optional[str], content_type: str) -> str:
    ext = ALLOWED_CONTENT_TYPES.get(content_type)
    if not ext:
        name = filename or ""
        ext = name.rsplit(".", 1)[-1].lower() if "." in name else "bin"
    return f"{folder}/{uuid.uuid4().hex}.{ext}"
