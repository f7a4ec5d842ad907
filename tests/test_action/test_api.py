"""Tests for the FastAPI API endpoints."""

from unittest.mock import patch

import pytest

_REPORT = "\n".join([
    "ОПН 2025 г.,,,,,",
    "По всем товарам.,,,,,",
    "Товар - название,,Ед.,Операции расхода,,",
    ",,,Кол-во,Сумма,",
    "1,Адреналин,амп.,5,700,V",
    "2,Азитромицин,уп.,2,150,e",
    "3,Аскорбиновая кислота,уп.,1,100,N",
    "4,Натрия хлорид,фл.,20,50,V",
    "5,Неизвестный,уп.,1,10,X",
    ",,Всего:,29,1010,",
])


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from abc_ven.action.api import app

    with TestClient(app) as c:
        yield c


def _inverted_settings(mock_settings) -> None:
    mock_settings.abc_a_threshold = 95.0
    mock_settings.abc_b_threshold = 80.0
    mock_settings.record_header_rows = 4
    mock_settings.record_total_marker = "Всего"
    mock_settings.record_delimiter = ","


def _items_payload() -> list[dict]:
    return [
        {"code": 1, "name": "Adrenaline", "unit": "amp", "quantity": 5, "amount": 700, "ven": "V"},
        {"code": 2, "name": "Azithromycin", "unit": "pack", "quantity": 2, "amount": 150, "ven": "e"},
        {"code": 3, "name": "Ascorbic acid", "quantity": 1, "amount": 100, "ven": "N"},
        {"code": 4, "name": "Saline", "unit": "vial", "quantity": 20, "amount": 50, "ven": "V"},
    ]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"


# ── /abc-ven/analyze ────────────────────────────────────────────────────────


class TestAnalyze:
    def test_analyze(self, client):
        resp = client.post("/abc-ven/analyze", json={"items": _items_payload()})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_count"] == 4
        assert data["total_amount"] == 1000
        assert [i["abc"] for i in data["items"]] == ["A", "A", "B", "C"]
        assert data["items"][1]["ven"] == "E"
        assert data["matrix"]["A"]["V"]["count"] == 1
        assert data["ven_by_abc"]["C"]["V"]["percent_amount"] == pytest.approx(100)
        assert [s["category"] for s in data["ven_summary"]] == ["V", "E", "N"]

    def test_custom_thresholds(self, client):
        resp = client.post(
            "/abc-ven/analyze",
            json={"items": _items_payload(), "a_threshold": 50, "b_threshold": 90},
        )
        assert resp.status_code == 200
        assert [i["abc"] for i in resp.json()["items"]] == ["A", "B", "B", "C"]

    def test_settings_thresholds_used_by_default(self, client):
        with patch("abc_ven.action.routers.abc_ven.settings") as mock_settings:
            mock_settings.abc_a_threshold = 50.0
            mock_settings.abc_b_threshold = 90.0
            resp = client.post("/abc-ven/analyze", json={"items": _items_payload()})
        assert [i["abc"] for i in resp.json()["items"]] == ["A", "B", "B", "C"]

    def test_inverted_thresholds(self, client):
        resp = client.post(
            "/abc-ven/analyze",
            json={"items": _items_payload(), "a_threshold": 95, "b_threshold": 80},
        )
        assert resp.status_code == 400
        assert "a_threshold" in resp.json()["error"]

    def test_empty_items(self, client):
        resp = client.post("/abc-ven/analyze", json={"items": []})
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_invalid_ven_rejected(self, client):
        payload = _items_payload()
        payload[0]["ven"] = "X"
        resp = client.post("/abc-ven/analyze", json={"items": payload})
        assert resp.status_code == 422

    def test_missing_amount_rejected(self, client):
        resp = client.post("/abc-ven/analyze", json={"items": [{"code": 1, "name": "A", "ven": "V"}]})
        assert resp.status_code == 422


# ── /abc-ven/upload ─────────────────────────────────────────────────────────


class TestUpload:
    def test_upload(self, client):
        resp = client.post(
            "/abc-ven/upload",
            files={"file": ("opn.csv", _REPORT.encode("utf-8"), "text/csv")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["file"] == "opn.csv"
        assert data["rows_loaded"] == 4
        assert data["rows_skipped"] == 1
        assert data["total_count"] == 4
        assert data["items"][0]["name"] == "Адреналин"
        assert data["abc_summary"][0]["count"] == 2

    def test_upload_without_valid_rows(self, client):
        text = "\n".join(_REPORT.split("\n")[:4] + ["x,Bad,уп.,1,1,V"])
        resp = client.post("/abc-ven/upload", files={"file": ("bad.csv", text.encode("utf-8"), "text/csv")})
        assert resp.status_code == 400
        assert resp.json()["rows_skipped"] == 1

    def test_upload_not_utf8(self, client):
        resp = client.post(
            "/abc-ven/upload",
            files={"file": ("cp1251.csv", _REPORT.encode("cp1251"), "text/csv")},
        )
        assert resp.status_code == 400
        assert "UTF-8" in resp.json()["error"]

    def test_upload_inverted_settings_thresholds(self, client):
        with patch("abc_ven.action.routers.abc_ven.settings") as mock_settings:
            _inverted_settings(mock_settings)
            resp = client.post(
                "/abc-ven/upload",
                files={"file": ("opn.csv", _REPORT.encode("utf-8"), "text/csv")},
            )
        assert resp.status_code == 400
        assert "a_threshold" in resp.json()["error"]


# ── /abc-ven/export ─────────────────────────────────────────────────────────


class TestExport:
    def test_export_csv(self, client):
        resp = client.post(
            "/abc-ven/export",
            files={"file": ("dept.csv", _REPORT.encode("utf-8"), "text/csv")},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="dept_abc_ven.csv"' in resp.headers["content-disposition"]
        lines = resp.text.strip().split("\n")
        assert lines[0] == "code;name;amount;percent_of_total;cumulative_percent;abc;ven"
        assert lines[1] == "1;Адреналин;700.00;70.00;70.00;A;V"
        assert len(lines) == 5

    def test_export_without_valid_rows(self, client):
        text = "\n".join(_REPORT.split("\n")[:4])
        resp = client.post("/abc-ven/export", files={"file": ("empty.csv", text.encode("utf-8"), "text/csv")})
        assert resp.status_code == 400

    def test_export_inverted_settings_thresholds(self, client):
        with patch("abc_ven.action.routers.abc_ven.settings") as mock_settings:
            _inverted_settings(mock_settings)
            resp = client.post(
                "/abc-ven/export",
                files={"file": ("dept.csv", _REPORT.encode("utf-8"), "text/csv")},
            )
        assert resp.status_code == 400
        assert "a_threshold" in resp.json()["error"]
