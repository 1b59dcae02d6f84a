import asyncio
import io
import docx
from fastapi.testclient import TestClient
from unittest.mock import patch
from app.services.extraction_service import extract_text


def test_read_root(client: TestClient):
    """Test that the API is alive."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "API is ready", "docs": "/docs"}


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_analyze_text(client: TestClient):
    """Test the analysis engine through the API."""
    payload = {"text": "Hello world. This is great!"}
    response = client.post("/analyze", json=payload)

    assert response.status_code == 200
    data = response.json()

    stats = data["stats"]
    assert stats["word_count"] == 5
    assert stats["sentence_count"] == 2
    assert stats["char_count"] == 27
    assert stats["paragraph_count"] == 1
    assert "analyzed_at" in stats

    # First upload: no comparison at all, not zeros
    assert data["differences"] is None
    assert data["previous_upload"] is None

    assert data["readability"] == "Very Easy"
    assert data["progress"]["target_words"] == 100000
    assert data["progress"]["remaining_words"] == 99995


def test_analyze_then_compare(client: TestClient):
    """Test that a second analysis is compared against the first."""
    client.post("/analyze", json={"text": "Hello world."})
    response = client.post(
        "/analyze", json={"text": "Hello world.\n\nThis is a second paragraph."}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["differences"]["word_count"] == 5
    assert data["differences"]["paragraph_count"] == 1
    assert data["previous_upload"]["word_count"] == 2
    assert "analyzed_at" in data["previous_upload"]


def test_analyze_empty_text(client: TestClient):
    """Test that empty text is refused and nothing is stored."""
    response = client.post("/analyze", json={"text": "   \n  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "No text found in the document."

    assert client.get("/history").status_code == 404


def test_upload_text_file(client: TestClient):
    files = {"file": ("essay.txt", b"Para one.\n\nPara two is longer.", "text/plain")}
    response = client.post("/upload", files=files)

    assert response.status_code == 200
    data = response.json()
    assert data["file_name"] == "essay.txt"
    assert data["stats"]["paragraph_count"] == 2


def test_upload_extracts_off_the_event_loop(client: TestClient):
    """Test that document parsing runs in a worker thread, not on the event loop."""
    seen = []

    def recording_extract(content, declared_format):
        try:
            asyncio.get_running_loop()
            seen.append("event loop")
        except RuntimeError:
            seen.append("worker thread")
        return extract_text(content, declared_format)

    with patch("app.main.extract_text", side_effect=recording_extract):
        files = {"file": ("essay.txt", b"Hello world.", "text/plain")}
        response = client.post("/upload", files=files)

    assert response.status_code == 200
    assert seen == ["worker thread"]


def test_upload_docx_file(client: TestClient):
    document = docx.Document()
    document.add_paragraph("The first paragraph of the essay.")
    document.add_paragraph("The second paragraph of the essay.")
    buf = io.BytesIO()
    document.save(buf)

    # Generic content type: the extension decides the format
    files = {"file": ("essay.docx", buf.getvalue(), "application/octet-stream")}
    response = client.post("/upload", files=files)

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["word_count"] == 12
    assert stats["paragraph_count"] == 2


def test_upload_unsupported_format(client: TestClient):
    files = {"file": ("photo.png", b"\x89PNG\r\n", "image/png")}
    response = client.post("/upload", files=files)

    assert response.status_code == 415
    assert "Unsupported file type" in response.json()["detail"]


def test_upload_corrupted_pdf(client: TestClient):
    files = {"file": ("broken.pdf", b"not a pdf at all", "application/pdf")}
    response = client.post("/upload", files=files)

    assert response.status_code == 422


def test_upload_empty_file(client: TestClient):
    files = {"file": ("empty.txt", b"", "text/plain")}
    response = client.post("/upload", files=files)

    assert response.status_code == 400


def test_upload_too_large(client: TestClient):
    with patch("app.main.MAX_UPLOAD_BYTES", 10):
        files = {"file": ("big.txt", b"word " * 10, "text/plain")}
        response = client.post("/upload", files=files)

    assert response.status_code == 413


def test_history_flow(client: TestClient):
    """Tests the history lifecycle.

    Flow: Empty -> Analyze -> View -> Delete -> Empty.
    """
    assert client.get("/history").status_code == 404

    client.post("/analyze", json={"text": "Hello world. This is great!"})

    response = client.get("/history")
    assert response.status_code == 200
    data = response.json()
    assert data["key"] == "latest"
    assert data["analysis"]["word_count"] == 5
    assert "readability" in data

    response = client.delete("/history")
    assert response.status_code == 200
    assert response.json() == {"message": "Deleted"}

    assert client.get("/history").status_code == 404
    assert client.delete("/history").status_code == 404


def test_per_document_history(document_client: TestClient):
    """Test that per-document mode compares uploads of the same file only."""
    client = document_client

    client.post("/upload", files={"file": ("a.txt", b"One two three.", "text/plain")})
    response = client.post(
        "/upload", files={"file": ("b.txt", b"Four five.", "text/plain")}
    )
    assert response.json()["differences"] is None

    response = client.post(
        "/upload", files={"file": ("a.txt", b"One two three four.", "text/plain")}
    )
    assert response.json()["differences"]["word_count"] == 1

    response = client.get("/history", params={"document": "b.txt"})
    assert response.status_code == 200
    assert response.json()["key"] == "b.txt"
    assert response.json()["analysis"]["word_count"] == 2
