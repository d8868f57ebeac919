from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

import src.api.app as countries_api


XLAND = {
    "shortName": "X",
    "fullName": "Xland",
    "isoAlpha2": "XX",
    "isoAlpha3": "XXX",
    "isoNumeric": "999",
    "population": 100,
    "square": 1.5,
}


@pytest.fixture
def client(scenarios):
    countries_api.app.dependency_overrides[countries_api.get_scenarios] = lambda: scenarios
    try:
        yield TestClient(countries_api.app)
    finally:
        countries_api.app.dependency_overrides.clear()


def test_api_status_reports_host_and_protocol(client) -> None:
    res = client.get("/api")
    assert res.status_code == 200
    assert res.json() == {"status": "server is running", "host": "testserver", "protocol": "http"}


def test_api_ping(client) -> None:
    res = client.get("/api/ping")
    assert res.status_code == 200
    assert res.json() == {"status": "pong"}


def test_list_countries_uses_camel_case(client) -> None:
    res = client.get("/api/country")
    assert res.status_code == 200
    payload = res.json()
    assert [c["isoAlpha2"] for c in payload] == ["RU", "FR"]
    assert set(payload[0]) == set(XLAND)


def test_post_then_get_round_trip(client) -> None:
    res = client.post("/api/country", json=XLAND)
    assert res.status_code == 204
    assert res.content == b""

    res = client.get("/api/country/XX")
    assert res.status_code == 200
    assert res.json() == XLAND
    assert client.get("/api/country/999").json() == XLAND


def test_get_malformed_code_is_400(client) -> None:
    res = client.get("/api/country/toolong!")
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "invalid_code"


def test_get_missing_code_is_404(client) -> None:
    res = client.get("/api/country/DE")
    assert res.status_code == 404
    assert res.json()["detail"]["error"] == "not_found"


def test_post_missing_fields_is_400(client) -> None:
    body = {k: v for k, v in XLAND.items() if k not in ("square", "isoNumeric")}
    res = client.post("/api/country", json=body)
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["error"] == "missing_fields"
    assert "isoNumeric" in detail["message"] and "square" in detail["message"]


def test_post_wrong_type_is_400(client) -> None:
    res = client.post("/api/country", json={**XLAND, "population": "lots"})
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "invalid_data"


def test_post_non_object_body_is_400(client) -> None:
    res = client.post("/api/country", content=b"[1, 2]", headers={"content-type": "application/json"})
    assert res.status_code == 400


@pytest.mark.parametrize(
    "override,error",
    [
        ({"shortName": ""}, "invalid_data"),
        ({"population": -1}, "invalid_data"),
        ({"square": -2.5}, "invalid_data"),
        ({"isoAlpha2": "xx"}, "invalid_code"),
        ({"isoNumeric": "9a9"}, "invalid_code"),
    ],
)
def test_post_rule_violations_are_400(client, override: dict, error: str) -> None:
    res = client.post("/api/country", json={**XLAND, **override})
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == error


def test_post_duplicate_code_is_409(client) -> None:
    res = client.post("/api/country", json={**XLAND, "isoAlpha3": "RUS"})
    assert res.status_code == 409
    assert res.json()["detail"]["error"] == "conflict"


def test_patch_empty_body_is_400(client) -> None:
    res = client.patch("/api/country/RU", json={})
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "empty_body"

    res = client.patch("/api/country/RU")
    assert res.status_code == 400


def test_patch_updates_mutable_fields_only(client) -> None:
    res = client.patch("/api/country/RU", json={"fullName": "Rossiya", "isoAlpha2": "ZZ", "square": 17.0})
    assert res.status_code == 200
    payload = res.json()
    assert payload["fullName"] == "Rossiya"
    assert payload["square"] == 17.0
    assert payload["shortName"] == "Russia"
    assert payload["isoAlpha2"] == "RU"

    assert client.get("/api/country/RUS").json()["fullName"] == "Rossiya"
    assert client.get("/api/country/ZZ").status_code == 404


def test_patch_negative_population_is_400(client) -> None:
    res = client.patch("/api/country/RU", json={"population": -10})
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "invalid_data"


def test_patch_missing_country_is_404(client) -> None:
    res = client.patch("/api/country/DE", json={"population": 10})
    assert res.status_code == 404


def test_delete_country(client) -> None:
    res = client.delete("/api/country/FR")
    assert res.status_code == 204
    assert client.get("/api/country/FR").status_code == 404


def test_delete_missing_and_malformed_codes(client) -> None:
    assert client.delete("/api/country/DE").status_code == 404
    assert client.delete("/api/country/fr").status_code == 400


def test_storage_failure_is_500(client, repository, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_get_all():
        raise RuntimeError("connection refused")

    monkeypatch.setattr(repository, "get_all", broken_get_all)
    res = client.get("/api/country")
    assert res.status_code == 500
    assert res.json()["detail"] == {"error": "internal_error", "message": "Internal Server Error"}


def test_health_reports_db_state() -> None:
    class _DB:
        def ping(self) -> bool:
            return True

    class _DownDB:
        def ping(self) -> bool:
            raise RuntimeError("db down")

    try:
        countries_api.app.dependency_overrides[countries_api.get_db] = lambda: _DB()
        res = TestClient(countries_api.app).get("/api/health")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "db": True}

        countries_api.app.dependency_overrides[countries_api.get_db] = lambda: _DownDB()
        res = TestClient(countries_api.app).get("/api/health")
        assert res.status_code == 500
        assert res.json() == {"ok": False, "error": "db down"}
    finally:
        countries_api.app.dependency_overrides.clear()


def _xland_body_with_square(raw_square: str) -> bytes:
    body = json.dumps({k: v for k, v in XLAND.items() if k != "square"})
    return (body[:-1] + f', "square": {raw_square}}}').encode()


@pytest.mark.parametrize("raw_square", ["1e400", "NaN", "Infinity", "-Infinity"])
def test_post_non_finite_square_is_400(client, raw_square: str) -> None:
    res = client.post(
        "/api/country",
        content=_xland_body_with_square(raw_square),
        headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "invalid_data"
    assert client.get("/api/country/XX").status_code == 404


@pytest.mark.parametrize("raw_square", ["1e400", "NaN"])
def test_patch_non_finite_square_is_400(client, raw_square: str) -> None:
    res = client.patch(
        "/api/country/RU",
        content=f'{{"square": {raw_square}}}'.encode(),
        headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "invalid_data"
    assert client.get("/api/country/RU").json()["square"] == 17_125_191.0


def test_schemas_module_is_documented() -> None:
    import src.api.schemas as schemas

    assert schemas.__doc__ and "camelCase" in schemas.__doc__
