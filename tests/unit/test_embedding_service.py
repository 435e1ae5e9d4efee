"""Embedding client behaviour against a mocked provider."""

import asyncio
import json

import httpx
import pytest

from app.exceptions import EmbeddingError
from app.services.embedding_service import EmbeddingService


def make_service(handler, api_key="sk-test", dimension=4):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmbeddingService(
        client,
        api_key=api_key,
        model="text-embedding-3-small",
        url="https://embeddings.test/v1/embeddings",
        dimension=dimension,
    )


def test_returns_vector_and_sends_model_and_input():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3, 0.4]}]})

    service = make_service(handler)
    vector = asyncio.run(service.generate_embedding("Plumber"))

    assert vector == [0.1, 0.2, 0.3, 0.4]
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {"model": "text-embedding-3-small", "input": "Plumber"}


def test_unconfigured_returns_none_without_calling_provider():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"data": [{"embedding": [0.0] * 4}]})

    service = make_service(handler, api_key="  ")
    assert service.is_configured is False
    assert asyncio.run(service.generate_embedding("Plumber")) is None
    assert calls == []


def test_empty_text_is_rejected():
    service = make_service(lambda request: httpx.Response(200))
    with pytest.raises(ValueError):
        asyncio.run(service.generate_embedding("   "))


def test_provider_error_status_raises():
    service = make_service(lambda request: httpx.Response(500, text="upstream down"))
    with pytest.raises(EmbeddingError, match="500"):
        asyncio.run(service.generate_embedding("Plumber"))


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(handler)
    with pytest.raises(EmbeddingError):
        asyncio.run(service.generate_embedding("Plumber"))


def test_malformed_body_raises():
    service = make_service(lambda request: httpx.Response(200, json={"data": []}))
    with pytest.raises(EmbeddingError, match="Malformed"):
        asyncio.run(service.generate_embedding("Plumber"))


def test_wrong_dimension_raises():
    service = make_service(lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2]}]}))
    with pytest.raises(EmbeddingError, match="dimensions"):
        asyncio.run(service.generate_embedding("Plumber"))


def test_validate_embedding_rejects_non_numeric():
    service = make_service(lambda request: httpx.Response(200))
    with pytest.raises(EmbeddingError):
        service.validate_embedding(["a", "b", "c", "d"])
    with pytest.raises(EmbeddingError):
        service.validate_embedding([0.1, float("nan"), 0.3, 0.4])
