from datetime import date, timedelta

from studymate.services.pdf_export import to_data_uri


def test_save_list_download_delete_pdf(client):
    r = client.post(
        "/pdfs",
        json={"title": "Cell Biology", "summary": "Cells are small.", "summaryType": "detailed", "summaryLength": 40},
    )
    assert r.status_code == 201
    pdf = r.json()["pdf"]
    assert set(pdf) == {"id", "title", "created_at"}

    listed = client.get("/pdfs").json()["pdfs"]
    assert [p["id"] for p in listed] == [pdf["id"]]
    assert "pdf_data" not in listed[0]

    r = client.get(f"/pdfs/{pdf['id']}/download")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert 'filename="cell_biology.pdf"' in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")

    assert client.delete(f"/pdfs/{pdf['id']}").status_code == 200
    assert client.get(f"/pdfs/{pdf['id']}/download").status_code == 404


def test_save_pdf_validation(client):
    assert client.post("/pdfs", json={"title": "", "summary": "x"}).status_code == 422
    assert client.post("/pdfs", json={"title": "t", "summary": "x", "summaryLength": 95}).status_code == 422
    assert client.post("/pdfs", json={"title": "t", "summary": "x", "summaryType": "poem"}).status_code == 422


def test_download_corrupt_payload_is_500(client, store):
    record = store.create_pdf("Broken", "not-a-data-uri")
    r = client.get(f"/pdfs/{record.id}/download")
    assert r.status_code == 500


def test_pdfs_are_per_user(client, other_store):
    other = other_store.create_pdf("Theirs", to_data_uri(b"%PDF-1.4"))
    assert client.get("/pdfs").json()["pdfs"] == []
    assert client.get(f"/pdfs/{other.id}/download").status_code == 404


def _session(client, subject, days, progress=0, start="10:00"):
    day = (date.today() + timedelta(days=days)).isoformat()
    r = client.post(
        "/sessions",
        json={
            "subject": subject,
            "topic": f"{subject} topic",
            "date": day,
            "start_time": start,
            "duration": "1 hour",
            "progress": progress,
        },
    )
    return r.json()["session"]


def test_dashboard_summary(client):
    later = _session(client, "Math", 3)
    soon = _session(client, "Math", 1, progress=50)
    _session(client, "History", 2, progress=100)
    _session(client, "Art", -1)

    for q in ("First?", "Second?", "Third?"):
        client.post("/doubts", json={"question": q})

    body = client.get("/dashboard").json()
    assert body["ok"] is True
    assert [s["id"] for s in body["upcoming_sessions"]] == [soon["id"], later["id"]]

    assert len(body["recent_doubts"]) == 2
    assert set(body["recent_doubts"][0]) == {"id", "question", "answered", "datetime"}

    progress = {p["subject"]: p for p in body["subject_progress"]}
    assert progress["History"]["progress"] == 100
    assert progress["Math"] == {"subject": "Math", "progress": 25, "total_sessions": 2, "completed_sessions": 0}
    assert progress["Art"]["progress"] == 0
    assert [p["subject"] for p in body["subject_progress"]][0] == "History"


def test_dashboard_empty(client):
    body = client.get("/dashboard").json()
    assert body["upcoming_sessions"] == []
    assert body["recent_doubts"] == []
    assert body["subject_progress"] == []
