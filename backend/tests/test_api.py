import pytest
from fastapi.testclient import TestClient

from gribreader.main import app
from gribreader.core.cache import DECODE_CACHE

import grib_builder as gb
from conftest import U_RAW


@pytest.fixture
def client(upload_dir):
    return TestClient(app)


@pytest.fixture
def stored(upload_dir, three_messages):
    (upload_dir / "sample.grib").write_bytes(three_messages)
    return "sample.grib"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_upload_returns_inventory(client, upload_dir, three_messages):
    res = client.post(
        "/upload",
        files=[("files", ("model.grb", three_messages, "application/octet-stream"))],
    )
    assert res.status_code == 201
    body = res.json()
    assert body["warnings"] == []
    (saved,) = body["files"]
    assert saved["filepath"] == "model.grb"
    assert saved["size_bytes"] == len(three_messages)
    assert saved["metadata"]["nmessages"] == 3
    assert saved["metadata"]["parameters"][0] == {"parameter": 33, "level": 700}
    assert (upload_dir / "model.grb").read_bytes() == three_messages


def test_upload_into_session(client, upload_dir, three_messages):
    res = client.post(
        "/upload",
        files=[("files", ("model.grb", three_messages, "application/octet-stream"))],
        data={"session_id": "abc"},
    )
    assert res.status_code == 201
    assert (upload_dir / "abc" / "model.grb").exists()


def test_upload_rejects_extension(client):
    res = client.post("/upload", files=[("files", ("model.nc", b"x", "application/octet-stream"))])
    assert res.status_code == 415


def test_upload_rejects_empty(client, upload_dir):
    res = client.post("/upload", files=[("files", ("empty.grb", b"", "application/octet-stream"))])
    assert res.status_code == 400
    assert not (upload_dir / "empty.grb").exists()


def test_upload_warns_on_invalid_grib(client):
    res = client.post("/upload", files=[("files", ("bad.grb", b"not a grib file", "application/octet-stream"))])
    assert res.status_code == 201
    body = res.json()
    assert "error" in body["files"][0]["metadata"]
    assert len(body["warnings"]) == 1


def test_decode(client, stored):
    res = client.post("/messages/decode", json={
        "filepath": stored,
        "criteria": [{"parameter": 34, "level": 700}, {"parameter": 33, "level": 700}],
        "include_data": True,
    })
    assert res.status_code == 200
    body = res.json()
    u, v = body["messages"]
    assert (u["parameter"], u["level"]) == (33, 700)
    assert (v["parameter"], v["level"]) == (34, 700)
    assert u["parameter_name"] == "u-component of wind"
    assert u["reference_time"] == "2024-03-15T12:30:00"
    assert u["grid"]["handled"] is True
    assert u["grid"]["number_of_lat_values"] == 3
    assert u["data"]["count"] == 6
    assert u["data"]["values"] == [16.0 + r * 0.5 for r in U_RAW]
    assert u["data"]["min"] == 16.0
    assert v["has_bitmap"] is True


def test_decode_without_values_uses_cache(client, stored):
    payload = {"filepath": stored, "criteria": [{"parameter": 33, "level": 700}]}
    first = client.post("/messages/decode", json=payload).json()
    assert first["messages"][0]["data"]["values"] is None
    assert len(DECODE_CACHE) == 1
    second = client.post("/messages/decode", json=payload).json()
    assert first == second


def test_decode_no_match_warns(client, stored):
    res = client.post("/messages/decode", json={
        "filepath": stored, "criteria": [{"parameter": 99, "level": 1}],
    })
    assert res.status_code == 200
    assert res.json()["messages"] == []
    assert res.json()["warnings"]


def test_decode_missing_file(client):
    res = client.post("/messages/decode", json={
        "filepath": "nope.grb", "criteria": [{"parameter": 33, "level": 700}],
    })
    assert res.status_code == 404


def test_decode_requires_criteria(client, stored):
    res = client.post("/messages/decode", json={"filepath": stored, "criteria": []})
    assert res.status_code == 422


def test_decode_rejects_path_traversal(client, stored):
    res = client.post("/messages/decode", json={
        "filepath": "../../etc/passwd", "criteria": [{"parameter": 33, "level": 700}],
    })
    assert res.status_code == 400


def test_decode_invalid_grib(client, upload_dir):
    (upload_dir / "bad.grb").write_bytes(gb.message(33, 700, edition=2))
    res = client.post("/messages/decode", json={
        "filepath": "bad.grb", "criteria": [{"parameter": 33, "level": 700}],
    })
    assert res.status_code == 422
    assert "version" in res.json()["detail"]


def test_inventory(client, stored, three_messages):
    res = client.post("/messages/inventory", json={"filepath": stored})
    assert res.status_code == 200
    body = res.json()
    assert body["size_bytes"] == len(three_messages)
    assert [m["parameter"] for m in body["messages"]] == [33, 34, 11]
    assert all(m["data"] is None for m in body["messages"])
    assert sum(m["length"] for m in body["messages"]) == len(three_messages)


def test_extract(client, stored, three_messages):
    res = client.post("/extract", json={
        "filepath": stored, "criteria": [{"parameter": 33, "level": 700}],
    })
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/octet-stream"
    assert 'filename="sample.subset.grb"' in res.headers["content-disposition"]
    length = int.from_bytes(three_messages[4:7], "big")
    assert res.content == three_messages[:length]


def test_extract_no_match(client, stored):
    res = client.post("/extract", json={
        "filepath": stored, "criteria": [{"parameter": 99, "level": 1}],
    })
    assert res.status_code == 404


def test_upload_short_section_warns(client, upload_dir):
    data = gb.raw_message(gb.short_section(5))
    res = client.post("/upload", files=[("files", ("short.grb", data, "application/octet-stream"))])
    assert res.status_code == 201
    body = res.json()
    assert "DataDecodeError" in body["files"][0]["metadata"]["error"]
    assert len(body["warnings"]) == 1


def test_decode_short_section_is_422(client, upload_dir):
    (upload_dir / "short.grb").write_bytes(gb.raw_message(gb.short_section(5)))
    res = client.post("/messages/decode", json={
        "filepath": "short.grb", "criteria": [{"parameter": 33, "level": 700}],
    })
    assert res.status_code == 422
    assert "too short" in res.json()["detail"]


def test_extract_output_name_is_sanitized(client, stored):
    res = client.post("/extract", json={
        "filepath": stored,
        "criteria": [{"parameter": 33, "level": 700}],
        "output_name": 'evil"; x=".grb',
    })
    assert res.status_code == 200
    disposition = res.headers["content-disposition"]
    assert disposition.count('"') == 2
    assert disposition.startswith('attachment; filename="')
