"""
Commerce integration for the Gaming Dashboard backend.

Provider-agnostic storefront client that supports:
- Shopify (products, orders, customers, product creation) over the
  Admin REST API
- Mock mode (for development/testing, returns realistic dummy data)

The active provider is controlled via STOREFRONT_PROVIDER ("shopify" by
default, or "mock"). An unconfigured Shopify provider does not fall back
to mock data: every call raises DependencyError, which is what makes the
agents switch to simulated figures.

Usage:
    client = CommerceClient.from_settings(settings)
    products = await client.get_products(limit=50)
    orders = await client.get_orders(limit=250, status="any")
    await client.create_product(build_draft_product("Gaming Chair Supreme", 129.99))
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from gaming_dashboard.config.schema import DashboardSettings, ShopifyConfig
from gaming_dashboard.exceptions import DependencyError

logger = logging.getLogger(__name__)

PRODUCT_VENDOR = "Gaming Professional"
PRODUCT_TYPE = "Gaming Equipment"
PRODUCT_TAGS = "gaming, professional, equipment"
PRODUCT_BODY_HTML = (
    "High quality professional gaming gear, built for demanding players "
    "who want maximum performance."
)
DRAFT_INVENTORY_QUANTITY = 10


def build_draft_product(title: str, price: float | str) -> dict[str, Any]:
    """
    Build the Admin API payload for a draft product with one variant.

    Products are created as drafts so someone reviews them before they
    go live in the store.
    """
    if not isinstance(price, str):
        price = f"{price:.2f}"
    return {
        "product": {
            "title": title,
            "body_html": PRODUCT_BODY_HTML,
            "vendor": PRODUCT_VENDOR,
            "product_type": PRODUCT_TYPE,
            "status": "draft",
            "variants": [
                {
                    "price": price,
                    "inventory_quantity": DRAFT_INVENTORY_QUANTITY,
                    "inventory_management": "shopify",
                }
            ],
            "tags": PRODUCT_TAGS,
        }
    }


def order_total(order: dict[str, Any]) -> float:
    """
    Total of a single order, preferring the USD-converted figure.

    Orders without either price field count as zero.
    """
    raw = order.get("total_price_usd") or order.get("total_price") or 0
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning(
            "order_total_unparseable",
            extra={"order_id": order.get("id"), "value": str(raw)[:50]},
        )
        return 0.0


# ---------------------------------------------------------------------------
# Abstract Interface
# ---------------------------------------------------------------------------


class StorefrontProvider(ABC):
    """Abstract storefront provider (Shopify, mock, ...)."""

    name: str = ""

    @abstractmethod
    async def get_products(self, limit: int = 50) -> list[dict[str, Any]]:
        """Return up to `limit` products."""
        ...

    @abstractmethod
    async def get_orders(
        self,
        limit: int = 250,
        status: str = "any",
    ) -> list[dict[str, Any]]:
        """Return up to `limit` orders with the given status filter."""
        ...

    @abstractmethod
    async def get_customers(self, limit: int = 50) -> list[dict[str, Any]]:
        """Return up to `limit` customer records."""
        ...

    @abstractmethod
    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a product from an Admin API payload; return the created record."""
        ...

    async def aclose(self) -> None:
        """Release network resources (no-op by default)."""
        return None


# ---------------------------------------------------------------------------
# Mock Provider (Development / Testing)
# ---------------------------------------------------------------------------

MOCK_PRODUCTS = [
    {
        "id": 8001,
        "title": "Gaming Mouse Pro X1",
        "status": "active",
        "vendor": PRODUCT_VENDOR,
        "product_type": PRODUCT_TYPE,
        "tags": PRODUCT_TAGS,
        "variants": [{"id": 18001, "price": "79.99", "inventory_quantity": 42}],
        "created_at": "2024-06-01T10:00:00Z",
    },
    {
        "id": 8002,
        "title": "Mechanical Keyboard Elite",
        "status": "active",
        "vendor": PRODUCT_VENDOR,
        "product_type": PRODUCT_TYPE,
        "tags": PRODUCT_TAGS,
        "variants": [{"id": 18002, "price": "149.00", "inventory_quantity": 17}],
        "created_at": "2024-07-15T14:30:00Z",
    },
    {
        "id": 8003,
        "title": "Wireless Gaming Headset",
        "status": "draft",
        "vendor": PRODUCT_VENDOR,
        "product_type": PRODUCT_TYPE,
        "tags": PRODUCT_TAGS,
        "variants": [{"id": 18003, "price": "119.50", "inventory_quantity": 10}],
        "created_at": "2024-08-01T09:00:00Z",
    },
]

MOCK_ORDERS = [
    {
        "id": 5001,
        "name": "#1001",
        "email": "alice@example.com",
        "total_price": "79.99",
        "total_price_usd": "79.99",
        "currency": "USD",
        "financial_status": "paid",
        "created_at": "2024-10-15T14:22:00Z",
    },
    {
        "id": 5002,
        "name": "#1002",
        "email": "bob@example.com",
        "total_price": "268.50",
        "currency": "EUR",
        "financial_status": "paid",
        "created_at": "2024-10-15T16:45:00Z",
    },
    {
        "id": 5003,
        "name": "#1003",
        "email": "carol@example.com",
        "total_price": "149.00",
        "currency": "USD",
        "financial_status": "refunded",
        "created_at": "2024-10-14T11:30:00Z",
    },
]

MOCK_CUSTOMERS = [
    {"id": 7001, "email": "alice@example.com", "orders_count": 1},
    {"id": 7002, "email": "bob@example.com", "orders_count": 1},
    {"id": 7003, "email": "carol@example.com", "orders_count": 1},
]


class MockStorefrontProvider(StorefrontProvider):
    """
    Mock storefront for development and testing.

    Returns realistic gaming-store data without touching Shopify.
    Created products are kept in memory.
    """

    name = "mock"

    def __init__(
        self,
        products: Optional[list[dict[str, Any]]] = None,
        orders: Optional[list[dict[str, Any]]] = None,
        customers: Optional[list[dict[str, Any]]] = None,
    ):
        self._products = copy.deepcopy(MOCK_PRODUCTS if products is None else products)
        self._orders = copy.deepcopy(MOCK_ORDERS if orders is None else orders)
        self._customers = copy.deepcopy(MOCK_CUSTOMERS if customers is None else customers)
        self.created_products: list[dict[str, Any]] = []

    async def get_products(self, limit: int = 50) -> list[dict[str, Any]]:
        return self._products[:limit]

    async def get_orders(
        self,
        limit: int = 250,
        status: str = "any",
    ) -> list[dict[str, Any]]:
        # Mock orders have no open/closed lifecycle; every status filter matches
        return self._orders[:limit]

    async def get_customers(self, limit: int = 50) -> list[dict[str, Any]]:
        return self._customers[:limit]

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        product = copy.deepcopy(payload.get("product", {}))
        product["id"] = 9000 + len(self._products) + 1
        product["created_at"] = datetime.now(timezone.utc).isoformat()
        self._products.append(product)
        self.created_products.append(product)

        logger.info(
            "mock_product_created",
            extra={"product_id": product["id"], "title": product.get("title")},
        )
        return product


# ---------------------------------------------------------------------------
# Shopify Provider
# ---------------------------------------------------------------------------


class ShopifyProvider(StorefrontProvider):
    """
    Shopify Admin REST API provider.

    Requires:
        SHOPIFY_SHOP_NAME: shop subdomain, e.g. "my-store" for my-store.myshopify.com
        SHOPIFY_ACCESS_TOKEN: Admin API access token

    Raises DependencyError on any transport, HTTP or payload problem,
    including when credentials are missing.
    """

    name = "shopify"

    def __init__(
        self,
        config: Optional[ShopifyConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ShopifyConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if not self.config.is_configured:
            raise DependencyError(
                "Shopify is not configured (SHOPIFY_SHOP_NAME / SHOPIFY_ACCESS_TOKEN)",
                service="shopify",
            )
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={
                    "X-Shopify-Access-Token": self.config.access_token,
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        client = self._get_client()
        try:
            resp = await client.request(method, path, params=params, json=json)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise DependencyError(
                f"Shopify {method} {path} returned HTTP {e.response.status_code}",
                service="shopify",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise DependencyError(
                f"Shopify {method} {path} failed: {e}",
                service="shopify",
            ) from e
        except ValueError as e:
            raise DependencyError(
                f"Shopify {method} {path} returned invalid JSON",
                service="shopify",
            ) from e

        if not isinstance(data, dict):
            raise DependencyError(
                f"Shopify {method} {path} returned an unexpected payload",
                service="shopify",
            )
        return data

    async def _get_collection(
        self,
        resource: str,
        params: dict[str, Any],
    ) -> list[dict[str, Any]]:
        data = await self._request("GET", f"{resource}.json", params=params)
        items = data.get(resource)
        if not isinstance(items, list):
            raise DependencyError(
                f"Shopify response is missing the '{resource}' list",
                service="shopify",
            )
        return items

    async def get_products(self, limit: int = 50) -> list[dict[str, Any]]:
        return await self._get_collection("products", {"limit": limit})

    async def get_orders(
        self,
        limit: int = 250,
        status: str = "any",
    ) -> list[dict[str, Any]]:
        return await self._get_collection("orders", {"status": status, "limit": limit})

    async def get_customers(self, limit: int = 50) -> list[dict[str, Any]]:
        return await self._get_collection("customers", {"limit": limit})

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "products.json", json=payload)
        product = data.get("product")
        if not isinstance(product, dict):
            raise DependencyError(
                "Shopify response is missing the created 'product'",
                service="shopify",
            )
        return product

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

STOREFRONT_PROVIDERS = {
    "mock": MockStorefrontProvider,
    "shopify": ShopifyProvider,
}


class CommerceClient:
    """
    High-level commerce client with provider selection.

    Usage:
        client = CommerceClient.from_settings(settings)
        customers = await client.get_customers(limit=50)
    """

    def __init__(self, storefront: Optional[StorefrontProvider] = None):
        self.storefront = storefront or MockStorefrontProvider()

    @classmethod
    def from_settings(cls, settings: DashboardSettings) -> CommerceClient:
        """Create a CommerceClient for the configured storefront provider."""
        if settings.storefront_provider == "mock":
            logger.info("commerce_client_mock_mode")
            return cls(storefront=MockStorefrontProvider())

        if not settings.shopify.is_configured:
            logger.warning(
                "shopify_not_configured: commerce calls will fail and agents will simulate data"
            )
        return cls(storefront=ShopifyProvider(settings.shopify))

    @property
    def provider_name(self) -> str:
        return self.storefront.name

    async def get_products(self, limit: int = 50) -> list[dict[str, Any]]:
        return await self.storefront.get_products(limit)

    async def get_orders(
        self, limit: int = 250, status: str = "any",
    ) -> list[dict[str, Any]]:
        return await self.storefront.get_orders(limit, status)

    async def get_customers(self, limit: int = 50) -> list[dict[str, Any]]:
        return await self.storefront.get_customers(limit)

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.storefront.create_product(payload)

    async def aclose(self) -> None:
        await self.storefront.aclose()
