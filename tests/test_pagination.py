"""
Unit tests for the page loop and the WooCommerce collection fetchers.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from woodash.core.context import Credentials
from woodash.core.errors import UpstreamUnavailableError
from woodash.services.woocommerce_service import fetch_customers, fetch_orders, fetch_products
from woodash.utils.pagination import paginate


def pages_of(*sizes):
    """Build a fetch_page coroutine serving pages with the given sizes."""
    pages = []
    next_id = 1
    for size in sizes:
        pages.append([{"id": i} for i in range(next_id, next_id + size)])
        next_id += size
    requested = []

    async def fetch_page(page):
        requested.append(page)
        return pages[page - 1] if page <= len(pages) else []

    return fetch_page, requested


class TestPaginate:
    """Test cases for paginate."""

    @pytest.mark.asyncio
    async def test_stops_on_short_page(self):
        fetch_page, requested = pages_of(100, 100, 100, 40)

        result = await paginate(fetch_page, page_size=100)

        assert len(result.items) == 340
        assert [r["id"] for r in result.items] == list(range(1, 341))
        assert requested == [1, 2, 3, 4]
        assert result.pages == 4
        assert result.truncated is False

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self):
        fetch_page, requested = pages_of(100, 100)

        result = await paginate(fetch_page, page_size=100)

        assert len(result) == 200
        assert requested == [1, 2, 3]
        assert result.truncated is False

    @pytest.mark.asyncio
    async def test_empty_first_page(self):
        fetch_page, requested = pages_of()

        result = await paginate(fetch_page, page_size=100)

        assert result.items == []
        assert requested == [1]

    @pytest.mark.asyncio
    async def test_page_ceiling_flags_truncation(self):
        requested = []

        async def always_full(page):
            requested.append(page)
            return [{"id": (page - 1) * 100 + i} for i in range(100)]

        result = await paginate(always_full, page_size=100, max_pages=50)

        assert len(result.items) == 5000
        assert requested == list(range(1, 51))
        assert result.pages == 50
        assert result.truncated is True

    @pytest.mark.asyncio
    async def test_short_last_page_at_ceiling_is_not_truncated(self):
        fetch_page, _ = pages_of(100, 30)

        result = await paginate(fetch_page, page_size=100, max_pages=2)

        assert len(result) == 130
        assert result.truncated is False

    @pytest.mark.asyncio
    async def test_error_mid_fetch_propagates(self):
        requested = []

        async def fetch_page(page):
            requested.append(page)
            if page == 2:
                raise UpstreamUnavailableError()
            return [{"id": page}] * 100

        with pytest.raises(UpstreamUnavailableError):
            await paginate(fetch_page, page_size=100)
        assert requested == [1, 2]


class TestFetchers:
    """Fetchers against a mocked WooCommerceClient."""

    @pytest.fixture
    def woo_client(self):
        client = MagicMock()
        client.credentials = Credentials("https://shop.example.com", "ck_a", "cs_b")
        client.get_list = AsyncMock(side_effect=lambda endpoint, params: [{"id": 1}])
        return client

    @pytest.mark.asyncio
    async def test_fetch_orders_params(self, woo_client):
        result = await fetch_orders(woo_client, {"status": "completed", "after": None}, page_size=100, max_pages=50)

        assert result.items == [{"id": 1}]
        woo_client.get_list.assert_awaited_once_with(
            "orders",
            {"status": "completed", "per_page": 100, "orderby": "date", "order": "desc", "page": 1},
        )

    @pytest.mark.asyncio
    async def test_fetch_customers_orders_by_registration(self, woo_client):
        await fetch_customers(woo_client, {"after": "2024-01-01T00:00:00"}, page_size=100, max_pages=50)

        endpoint, params = woo_client.get_list.await_args.args
        assert endpoint == "customers"
        assert params["orderby"] == "registered_date"
        assert params["order"] == "desc"
        assert params["after"] == "2024-01-01T00:00:00"

    @pytest.mark.asyncio
    async def test_page_size_capped_at_100(self, woo_client):
        await fetch_products(woo_client, {"status": "publish"}, page_size=250, max_pages=50)

        _, params = woo_client.get_list.await_args.args
        assert params["per_page"] == 100

    @pytest.mark.asyncio
    async def test_failed_page_discards_partial_results(self, woo_client):
        woo_client.get_list = AsyncMock(side_effect=[
            [{"id": i} for i in range(100)],
            UpstreamUnavailableError(),
            [{"id": 999}],
        ])

        with pytest.raises(UpstreamUnavailableError):
            await fetch_orders(woo_client, {}, page_size=100, max_pages=50)
        assert woo_client.get_list.await_count == 2
