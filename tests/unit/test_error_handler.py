"""Tests for the handle_http_errors decorator."""

import pytest
from fastapi import HTTPException

from relay.exceptions import AgentIOError, NotFoundError
from relay.utils.error_handler import handle_http_errors


class TestHandleHTTPErrors:
    """Test handle_http_errors decorator for HTTP endpoints."""

    @pytest.mark.asyncio
    async def test_successful_execution(self):
        @handle_http_errors
        async def endpoint():
            return {"status": "success"}

        assert await endpoint() == {"status": "success"}

    @pytest.mark.asyncio
    async def test_not_found_becomes_404(self):
        @handle_http_errors
        async def endpoint():
            raise NotFoundError("c1")

        with pytest.raises(HTTPException) as exc_info:
            await endpoint()

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Client c1 not found"

    @pytest.mark.asyncio
    async def test_io_error_becomes_500(self):
        @handle_http_errors
        async def endpoint():
            raise AgentIOError("c1", "broken pipe")

        with pytest.raises(HTTPException) as exc_info:
            await endpoint()

        assert exc_info.value.status_code == 500
        assert "broken pipe" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self):
        @handle_http_errors
        async def endpoint():
            raise RuntimeError("unexpected")

        with pytest.raises(RuntimeError):
            await endpoint()

    def test_preserves_signature_metadata(self):
        @handle_http_errors
        async def endpoint(client_id: str):
            """Docstring."""

        assert endpoint.__name__ == "endpoint"
        assert endpoint.__doc__ == "Docstring."
