from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from reflect.app.metrics import REQUEST_COUNT, REQUEST_ERRORS
from reflect.app.middleware import RequestLoggingMiddleware


def _metric_value(counter, **labels) -> float:
    for family in counter.collect():
        for sample in family.samples:
            if all(sample.labels.get(key) == value for key, value in labels.items()):
                return sample.value
    return 0.0


def _app_with_middleware() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    return app


def test_request_logging_success_adds_header() -> None:
    app = _app_with_middleware()

    @app.get("/ping")
    async def ping() -> dict[str, str]:  # pragma: no cover - executed via client
        return {"pong": "ok"}

    before = _metric_value(REQUEST_COUNT, method="GET", path="/ping", status="200")
    with TestClient(app) as client:
        response = client.get("/ping")
    after = _metric_value(REQUEST_COUNT, method="GET", path="/ping", status="200")

    assert response.status_code == 200
    assert response.headers.get("X-Request-ID")
    assert after == pytest.approx(before + 1.0)


def test_request_logging_reuses_request_id_and_route_template(
    caplog: pytest.LogCaptureFixture,
) -> None:
    app = _app_with_middleware()

    @app.get("/items/{item_id}")
    async def item(item_id: str) -> dict[str, str]:  # pragma: no cover - executed via client
        return {"id": item_id}

    before = _metric_value(REQUEST_COUNT, method="GET", path="/items/{item_id}", status="200")
    with caplog.at_level(logging.INFO, logger="reflect.request"):
        with TestClient(app) as client:
            response = client.get("/items/42", headers={"X-Request-ID": "req-abc"})
    after = _metric_value(REQUEST_COUNT, method="GET", path="/items/{item_id}", status="200")

    assert response.headers["X-Request-ID"] == "req-abc"
    assert after == pytest.approx(before + 1.0)
    records = [r for r in caplog.records if r.name == "reflect.request"]
    assert records
    assert records[-1].request_id == "req-abc"
    assert records[-1].path == "/items/{item_id}"


def test_request_logging_failure_logs_error() -> None:
    app = _app_with_middleware()

    @app.get("/boom")
    async def boom() -> dict[str, str]:  # pragma: no cover - executed via client
        raise RuntimeError("boom")

    before_count = _metric_value(REQUEST_COUNT, method="GET", path="/boom", status="500")
    before_errors = _metric_value(REQUEST_ERRORS, method="GET", path="/boom", status="500")

    with TestClient(app) as client:
        with pytest.raises(RuntimeError):
            client.get("/boom")

    after_count = _metric_value(REQUEST_COUNT, method="GET", path="/boom", status="500")
    after_errors = _metric_value(REQUEST_ERRORS, method="GET", path="/boom", status="500")

    assert after_count == pytest.approx(before_count + 1.0)
    assert after_errors == pytest.approx(before_errors + 1.0)
