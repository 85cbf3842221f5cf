from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime

import fitz  # PyMuPDF

DATA_URI_PREFIX = "data:application/pdf;filename=generated.pdf;base64,"

# A4 in points
PAGE_WIDTH = 595
PAGE_HEIGHT = 842
MARGIN = 20 * 72 / 25.4  # 20mm

FONT = "helv"
TITLE_SIZE = 18
META_SIZE = 10
BODY_SIZE = 12
META_COLOR = (100 / 255, 100 / 255, 100 / 255)
BODY_COLOR = (0, 0, 0)
LINE_GAP = 1.4


def wrap_text(text: str, max_width: float, fontsize: float = BODY_SIZE, fontname: str = FONT) -> list[str]:
    """Greedy word wrap by rendered width. Paragraph breaks are kept as empty lines."""
    lines: list[str] = []
    for paragraph in (text or "").splitlines():
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if fitz.get_text_length(candidate, fontname=fontname, fontsize=fontsize) <= max_width or not current:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def build_summary_pdf(
    title: str,
    summary_type: str,
    summary_length: int,
    body: str,
    generated_at: datetime | None = None,
) -> bytes:
    generated_at = generated_at or datetime.now()
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    y = MARGIN + TITLE_SIZE

    title_lines = wrap_text(title, PAGE_WIDTH - 2 * MARGIN, fontsize=TITLE_SIZE)
    for i, line in enumerate(title_lines):
        page.insert_text((MARGIN, y), line, fontsize=TITLE_SIZE, fontname=FONT, color=BODY_COLOR)
        y += TITLE_SIZE * (LINE_GAP if i < len(title_lines) - 1 else 1)

    meta = [
        f"Summary Type: {summary_type.capitalize()}",
        f"Summary Length: {summary_length}%",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    for line in meta:
        page.insert_text((MARGIN, y), line, fontsize=META_SIZE, fontname=FONT, color=META_COLOR)
        y += META_SIZE * LINE_GAP
    y += BODY_SIZE

    line_height = BODY_SIZE * LINE_GAP
    for line in wrap_text(body, PAGE_WIDTH - 2 * MARGIN):
        if y > PAGE_HEIGHT - MARGIN:
            page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
            y = MARGIN + BODY_SIZE
        if line:
            page.insert_text((MARGIN, y), line, fontsize=BODY_SIZE, fontname=FONT, color=BODY_COLOR)
        y += line_height

    try:
        return doc.tobytes()
    finally:
        doc.close()


def to_data_uri(pdf_bytes: bytes) -> str:
    return DATA_URI_PREFIX + base64.b64encode(pdf_bytes).decode("ascii")


def decode_data_uri(data: str) -> bytes:
    """Accepts any `data:...;base64,` prefix or a bare base64 payload."""
    payload = data or ""
    if payload.startswith("data:"):
        _, sep, payload = payload.partition("base64,")
        if not sep:
            raise ValueError("PDF data is not base64 encoded")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"PDF data is not valid base64: {e}") from e


def pdf_filename(title: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", title or "", flags=re.IGNORECASE).lower() + ".pdf"
