# jobassist/services/parse_utils.py
"""
Helpers to extract text from uploaded CV bytes.
- PDF  -> pdfminer.six
- DOCX -> python-docx
- TXT  -> decode bytes
Legacy binary .doc files are not supported and raise UnsupportedDocument.
"""

import io
from typing import Optional, Tuple

from docx import Document
from pdfminer.high_level import extract_text_to_fp

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class UnsupportedDocument(Exception):
    pass


def _is_pdf_bytes(b: bytes) -> bool:
    return b.startswith(b"%PDF")

def _is_docx_bytes(b: bytes) -> bool:
    # docx is a zip archive with '[Content_Types].xml' file; check PK header
    return b.startswith(b"PK")

def parse_text_bytes(b: bytes, encoding: str = "utf-8") -> str:
    try:
        return b.decode(encoding)
    except UnicodeDecodeError:
        return b.decode("latin-1", errors="replace")

def parse_docx_bytes(b: bytes) -> str:
    doc = Document(io.BytesIO(b))
    paras = [p.text.strip() for p in doc.paragraphs if p.text and p.text.strip()]
    return "\n".join(paras)

def parse_pdf_bytes(b: bytes) -> str:
    """
    Extract text from PDF bytes using pdfminer.six high-level API.
    """
    output = io.StringIO()
    extract_text_to_fp(io.BytesIO(b), output, laparams=None)
    return output.getvalue()

def extract_text_auto(b: bytes, mime_type: Optional[str] = None) -> Tuple[str, str]:
    """
    Detect type from the magic bytes (the declared mime type only breaks ties)
    and parse. Returns (text, type_str), type_str one of "pdf", "docx", "txt".
    """
    if not b:
        return "", "txt"
    if _is_pdf_bytes(b):
        return parse_pdf_bytes(b).strip(), "pdf"
    if _is_docx_bytes(b) or mime_type == DOCX_MIME:
        return parse_docx_bytes(b).strip(), "docx"
    if b.startswith(OLE_MAGIC):
        raise UnsupportedDocument("Legacy .doc files cannot be read; save as DOCX or PDF")
    return parse_text_bytes(b).strip(), "txt"
