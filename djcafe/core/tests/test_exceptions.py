"""Tests for the error hierarchy and its problem-details handlers."""

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from djcafe.core.exceptions import (
    BadRequestError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    register_exception_handlers,
)


class Order(BaseModel):
    quantity: int = Field(..., ge=1)


def integrity_error(sqlstate: str | None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, SimpleNamespace(sqlstate=sqlstate))


@pytest.fixture
async def error_client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Table not found: 7", details={"table_id": "7"})

    @app.get("/conflict")
    async def conflict():
        raise ConflictError()

    @app.get("/database")
    async def database():
        raise DatabaseError("connection reset by peer")

    @app.get("/duplicate")
    async def duplicate():
        raise integrity_error("23505")

    @app.get("/dangling")
    async def dangling():
        raise integrity_error("23503")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    @app.post("/orders")
    async def orders(order: Order):
        return order

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac


class TestErrorClasses:
    def test_default_message(self):
        error = ConflictError()
        assert error.message == "Resource conflict"
        assert error.details == {}
        assert str(error) == "Resource conflict"

    def test_title_from_code(self):
        assert BadRequestError("x").title == "Bad Request"
        assert NotFoundError("x").title == "Not Found"

    def test_status_codes(self):
        assert NotFoundError.status_code == 404
        assert ConflictError.status_code == 409
        assert BadRequestError.status_code == 400
        assert DatabaseError.status_code == 500


class TestHandlers:
    @pytest.mark.asyncio
    async def test_not_found_problem(self, error_client):
        response = await error_client.get("/missing")

        assert response.status_code == 404
        assert response.headers["content-type"] == "application/problem+json"
        body = response.json()
        assert body["type"] == "/errors/not-found"
        assert body["detail"] == "Table not found: 7"
        assert body["code"] == "NOT_FOUND"
        assert body["context"] == {"table_id": "7"}

    @pytest.mark.asyncio
    async def test_conflict_uses_default_message(self, error_client):
        body = (await error_client.get("/conflict")).json()
        assert body["status"] == 409
        assert body["detail"] == "Resource conflict"
        assert "context" not in body

    @pytest.mark.asyncio
    async def test_server_error_hides_message(self, error_client):
        response = await error_client.get("/database")

        assert response.status_code == 500
        assert "connection reset" not in response.text
        assert response.json()["type"] == "/errors/database"

    @pytest.mark.asyncio
    async def test_unique_violation(self, error_client):
        response = await error_client.get("/duplicate")

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_foreign_key_violation(self, error_client):
        response = await error_client.get("/dangling")

        assert response.status_code == 409
        assert "does not exist or is still in use" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_unhandled_error(self, error_client):
        response = await error_client.get("/boom")

        assert response.status_code == 500
        assert "secret internals" not in response.text
        assert response.json()["code"] == "INTERNAL_ERROR"

    @pytest.mark.asyncio
    async def test_validation_lists_fields(self, error_client):
        response = await error_client.post("/orders", json={"quantity": 0})

        assert response.status_code == 422
        body = response.json()
        assert body["errors"][0]["field"] == "quantity"
        assert body["detail"] == body["errors"][0]["message"]
