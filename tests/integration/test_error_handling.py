"""
Integration tests for the boundary error mapping and request logging.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware.logging import AccessLoggingMiddleware
from app.services.product_service import ProductService


@pytest.mark.asyncio
class TestUnexpectedErrors:

    async def test_unhandled_exception_is_500(self, client: AsyncClient, mocker):
        mocker.patch.object(ProductService, "get_all", side_effect=RuntimeError("database exploded"))

        response = await client.get("/api/products")

        assert response.status_code == 500
        assert response.json() == {"status": "Error", "message": "database exploded"}

    async def test_production_hides_details(self, client: AsyncClient, mocker):
        mocker.patch.object(ProductService, "get_all", side_effect=RuntimeError("database exploded"))
        mocker.patch("app.api.responses.isProductionMode", return_value=True)

        response = await client.get("/api/products")

        assert response.status_code == 500
        assert response.json()["message"] == "An internal server error occurred."

    async def test_error_reported_to_sentry(self, client: AsyncClient, mocker):
        mocker.patch.object(ProductService, "get_all", side_effect=RuntimeError("boom"))
        capture = mocker.patch("app.api.responses.capture_error")

        await client.get("/api/products")

        capture.assert_called_once()
        assert isinstance(capture.call_args.args[0], RuntimeError)


@pytest.mark.asyncio
class TestRequestId:

    async def test_request_id_header(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    async def test_request_id_is_propagated(self, client: AsyncClient):
        response = await client.get("/api/products", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_request_id_on_unhandled_error(self, client: AsyncClient, mocker):
        mocker.patch.object(ProductService, "get_all", side_effect=RuntimeError("boom"))

        response = await client.get("/api/products", headers={"X-Request-ID": "err-1"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "err-1"
        assert response.json() == {"status": "Error", "message": "boom"}


@pytest.mark.asyncio
class TestAccessLog:

    @pytest.fixture
    def failing_app(self):
        app = FastAPI()
        app.add_middleware(AccessLoggingMiddleware, enabled=True)

        @app.get("/api/fail")
        async def fail():
            raise RuntimeError("boom")

        return app

    async def test_failed_request_is_logged_as_500(self, failing_app, mocker):
        log_request = mocker.patch("app.middleware.logging.logger.request")
        mocker.patch("app.api.responses.capture_error")

        transport = ASGITransport(app=failing_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/api/fail")

        assert response.status_code == 500
        log_request.assert_called_once()
        assert log_request.call_args.kwargs["status_code"] == 500
        assert log_request.call_args.kwargs["path"] == "/api/fail"
