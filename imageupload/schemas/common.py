from typing import Dict, Iterable, List, Literal

UploadStatus = Literal["pending", "uploading", "success", "error"]

DEFAULT_CONTENT_TYPE = "application/octet-stream"

IMAGE_CONTENT_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]
PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MIME_TO_EXTS: Dict[str, List[str]] = {
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "image/gif": [".gif"],
    "image/webp": [".webp"],
    PDF_CONTENT_TYPE: [".pdf"],
    DOCX_CONTENT_TYPE: [".docx"],
}


def extensions_for(content_types: Iterable[str]) -> List[str]:
    """
    Extensions accepted for a list of MIME types. Unknown types fall back to
    their subtype (``application/x-foo`` -> ``.x-foo``).
    """
    exts: List[str] = []
    for ct in content_types:
        for ext in MIME_TO_EXTS.get(ct, [f".{ct.split('/')[-1]}"]):
            if ext not in exts:
                exts.append(ext)
    return exts
