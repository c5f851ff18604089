"""
Tests for document upload and text extraction.
"""

import io
import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

from thesisflow.api.v1 import documents as documents_api


def _upload(client: TestClient, name: str, data: bytes, mime: str, **form):
    return client.post("/api/documents/upload", files={"file": (name, data, mime)}, data=form)


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_upload_text_document(thesis_client: TestClient):
    response = _upload(thesis_client, "notes.txt", b"Sleep\x00 helps memory", "text/plain; charset=utf-8")

    assert response.status_code == 201
    document = response.json()
    assert document["content"] == "Sleep helps memory"
    assert document["title"] == "notes.txt"
    assert document["filename"] == "notes.txt"
    assert document["mime_type"] == "text/plain"


def test_upload_uses_form_title(thesis_client: TestClient):
    response = _upload(thesis_client, "notes.txt", b"abc", "text/plain", title="Field notes")

    assert response.json()["title"] == "Field notes"


def test_upload_invalid_utf8_is_replaced(thesis_client: TestClient):
    response = _upload(thesis_client, "latin.txt", b"caf\xe9", "text/plain")

    assert response.status_code == 201
    assert response.json()["content"] == "caf�"


def test_upload_blank_pdf(thesis_client: TestClient):
    response = _upload(thesis_client, "paper.pdf", _blank_pdf(), "application/pdf")

    assert response.status_code == 201
    assert response.json()["content"] == ""


def test_unsupported_type_is_rejected_without_storing(thesis_client: TestClient):
    response = _upload(thesis_client, "data.csv", b"a,b\n1,2", "text/csv")

    assert response.status_code == 415
    assert thesis_client.get("/api/documents").json() == []


def test_corrupt_pdf_is_rejected(thesis_client: TestClient):
    response = _upload(thesis_client, "broken.pdf", b"this is not a pdf", "application/pdf")

    assert response.status_code == 422
    assert thesis_client.get("/api/documents").json() == []


def test_oversized_upload_is_rejected(thesis_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(documents_api.settings, "max_upload_bytes", 16)

    response = _upload(thesis_client, "long.txt", b"x" * 17, "text/plain")

    assert response.status_code == 413
    assert thesis_client.get("/api/documents").json() == []


def test_upload_requires_thesis(auth_client: TestClient):
    response = _upload(auth_client, "notes.txt", b"abc", "text/plain")

    assert response.status_code == 400


def test_delete_document(thesis_client: TestClient):
    document = _upload(thesis_client, "notes.txt", b"abc", "text/plain").json()

    assert thesis_client.delete(f"/api/documents/{document['id']}").status_code == 204
    assert thesis_client.get("/api/documents").json() == []
