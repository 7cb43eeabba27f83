"""
Unit tests for request and user context management.

Verifies get/set operations and isolation between concurrent async tasks, which
is what keeps request IDs of parallel workflow runs apart in the logs.
"""

import asyncio

import pytest

from chatflow.utils.request_context import _request_id_var, get_request_id, set_request_id
from chatflow.utils.user_context import _user_context_var, get_user_context, set_user_context


class TestRequestContextBasics:
    def setup_method(self) -> None:
        """Reset context before each test."""
        _request_id_var.set(None)
        _user_context_var.set(None)

    def test_set_and_get_request_id(self) -> None:
        set_request_id("req_test_12345")
        assert get_request_id() == "req_test_12345"

    def test_request_id_default_none(self) -> None:
        assert get_request_id() is None

    def test_set_and_get_user(self) -> None:
        set_user_context("client-a")
        assert get_user_context() == "client-a"


class TestRequestContextIsolation:
    @pytest.mark.asyncio
    async def test_concurrent_tasks_keep_their_own_ids(self) -> None:
        async def handle(request_id: str) -> str | None:
            set_request_id(request_id)
            await asyncio.sleep(0)
            return get_request_id()

        results = await asyncio.gather(*(handle(f"req_{n}") for n in range(5)))

        assert results == [f"req_{n}" for n in range(5)]

    @pytest.mark.asyncio
    async def test_child_task_inherits_context(self) -> None:
        set_request_id("req_parent")

        async def child() -> str | None:
            return get_request_id()

        assert await asyncio.create_task(child()) == "req_parent"
