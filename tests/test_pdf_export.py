import base64
from datetime import datetime

import fitz
import pytest

from studymate.services.pdf_export import (
    DATA_URI_PREFIX,
    MARGIN,
    PAGE_WIDTH,
    build_summary_pdf,
    decode_data_uri,
    pdf_filename,
    to_data_uri,
    wrap_text,
)


def _text_of(pdf_bytes: bytes) -> str:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def test_summary_pdf_has_title_metadata_and_body():
    pdf = build_summary_pdf(
        "Cell Biology",
        "concise",
        50,
        "Cells are the basic unit of life.",
        generated_at=datetime(2026, 3, 4, 5, 6, 7),
    )
    assert pdf.startswith(b"%PDF")
    text = _text_of(pdf)
    assert "Cell Biology" in text
    assert "Summary Type: Concise" in text
    assert "Summary Length: 50%" in text
    assert "Generated: 2026-03-04 05:06:07" in text
    assert "basic unit of life" in text


def test_long_body_flows_onto_more_pages():
    body = "\n".join(f"Line {i} " + "word " * 20 for i in range(200))
    doc = fitz.open(stream=build_summary_pdf("Long", "detailed", 90, body), filetype="pdf")
    try:
        assert doc.page_count > 1
    finally:
        doc.close()


def test_wrap_text_respects_width_and_paragraphs():
    lines = wrap_text("alpha beta gamma delta\n\nepsilon", max_width=60, fontsize=12)
    assert len(lines) > 3
    assert "" in lines
    for line in lines:
        if " " in line:
            assert fitz.get_text_length(line, fontname="helv", fontsize=12) <= 60


def test_data_uri_round_trip():
    uri = to_data_uri(b"%PDF-1.7 fake")
    assert uri.startswith(DATA_URI_PREFIX)
    assert decode_data_uri(uri) == b"%PDF-1.7 fake"
    assert decode_data_uri(base64.b64encode(b"raw").decode()) == b"raw"


def test_decode_data_uri_rejects_garbage():
    with pytest.raises(ValueError):
        decode_data_uri("data:application/pdf,not-base64")
    with pytest.raises(ValueError):
        decode_data_uri("%%%")


@pytest.mark.parametrize(
    "title,expected",
    [("My Notes", "my_notes.pdf"), ("Ch. 3: Cells!", "ch__3__cells_.pdf"), ("ABC123", "abc123.pdf")],
)
def test_pdf_filename(title, expected):
    assert pdf_filename(title) == expected


def test_long_title_wraps_inside_the_margins():
    title = "A very long summary title about photosynthesis and cellular respiration in plants " * 2
    doc = fitz.open(stream=build_summary_pdf(title.strip(), "concise", 50, "Body."), filetype="pdf")
    try:
        words = doc[0].get_text("words")
    finally:
        doc.close()
    title_words = [w for w in words if w[4] == "respiration"]
    assert len(title_words) == 2
    assert title_words[0][1] != title_words[1][1]
    assert max(w[2] for w in words) <= PAGE_WIDTH - MARGIN + 1
