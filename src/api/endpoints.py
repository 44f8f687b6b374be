# src/api/endpoints.py
from __future__ import annotations

from typing import List, Optional

from api.client import HttpClient
from api.errors import ValidationError
from api.models import (
    ORDER_STATUSES,
    AdminUser,
    AuthResult,
    DashboardStats,
    Order,
    PaginatedResponse,
    Product,
    User,
    parse_list,
)


def _page_params(page: int, limit: int, search: Optional[str], **extra) -> dict:
    params = {
        "page": page,
        "limit": limit,
        "search": (search or "").strip() or None,
        "paginated": "true",
    }
    params.update(extra)
    return params


# ---------------------------
# Storefront accounts
# ---------------------------


async def login_user(client: HttpClient, email: str, password: str) -> AuthResult:
    data = await client.post(
        "/api/auth/login", json={"email": email, "password": password}
    )
    return AuthResult.from_user_json(data)


async def register_user(
    client: HttpClient, name: str, email: str, password: str
) -> AuthResult:
    data = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    return AuthResult.from_user_json(data)


async def get_user_profile(client: HttpClient) -> User:
    return User.from_json(await client.get("/api/users/profile"))


async def update_user_profile(client: HttpClient, name: str, email: str) -> User:
    data = await client.put("/api/users/profile", json={"name": name, "email": email})
    return User.from_json(data)


# ---------------------------
# Admin auth
# ---------------------------


async def login_admin(client: HttpClient, email: str, password: str) -> AuthResult:
    data = await client.post(
        "/api/admin/login", json={"email": email, "password": password}
    )
    return AuthResult.from_admin_json(data)


async def register_admin(
    client: HttpClient, name: str, email: str, password: str
) -> AuthResult:
    data = await client.post(
        "/api/admin/register",
        json={"name": name, "email": email, "password": password},
    )
    return AuthResult.from_admin_json(data)


async def get_current_admin(client: HttpClient) -> AdminUser:
    """Used to verify a stored token."""
    return AdminUser.from_json(await client.get("/api/admin/profile"))


async def list_users(client: HttpClient) -> List[AdminUser]:
    data = await client.get("/api/admin/users")
    return parse_list(data, AdminUser.from_json, "user")


# ---------------------------
# Dashboard
# ---------------------------


async def get_dashboard_stats(client: HttpClient) -> DashboardStats:
    return DashboardStats.from_json(await client.get("/api/admin/dashboard"))


# ---------------------------
# Orders
# ---------------------------


async def list_orders_page(
    client: HttpClient,
    page: int,
    limit: int,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> PaginatedResponse[Order]:
    """Server-side pagination. Fails on backends that don't support it."""
    data = await client.get(
        "/api/admin/orders", params=_page_params(page, limit, search, status=status)
    )
    return PaginatedResponse.from_json(data, Order.from_json)


async def list_orders(client: HttpClient) -> List[Order]:
    """The whole collection, unpaginated."""
    data = await client.get("/api/admin/orders")
    return parse_list(data, Order.from_json, "order")


async def get_order(client: HttpClient, order_id: str) -> Order:
    return Order.from_json(await client.get(f"/api/admin/orders/{order_id}"))


async def update_order_status(
    client: HttpClient, order_id: str, status: str, note: Optional[str] = None
) -> Order:
    """
    Move an order to `status`. The backend appends a statusHistory entry
    and returns the updated order.
    """
    if status not in ORDER_STATUSES:
        raise ValidationError(
            f"Unknown order status '{status}'. Use one of: {', '.join(ORDER_STATUSES)}"
        )
    body = {"status": status}
    if note:
        body["note"] = note
    data = await client.put(f"/api/admin/orders/{order_id}/status", json=body)
    return Order.from_json(data)


# ---------------------------
# Products
# ---------------------------


async def list_products_page(
    client: HttpClient, page: int, limit: int, search: Optional[str] = None
) -> PaginatedResponse[Product]:
    data = await client.get("/api/products", params=_page_params(page, limit, search))
    return PaginatedResponse.from_json(data, Product.from_json)


async def list_products(client: HttpClient) -> List[Product]:
    data = await client.get("/api/products")
    return parse_list(data, Product.from_json, "product")


async def get_product(client: HttpClient, product_id: str) -> Product:
    return Product.from_json(await client.get(f"/api/products/{product_id}"))


async def create_product(client: HttpClient, payload: dict) -> Product:
    return Product.from_json(await client.post("/api/products", json=payload))


async def update_product(client: HttpClient, product_id: str, payload: dict) -> Product:
    data = await client.put(f"/api/products/{product_id}", json=payload)
    return Product.from_json(data)


async def delete_product(client: HttpClient, product_id: str) -> None:
    await client.delete(f"/api/products/{product_id}")


# ---------------------------
# Misc
# ---------------------------


async def health_check(client: HttpClient) -> dict:
    data = await client.get("/api/health")
    return data if isinstance(data, dict) else {"status": str(data)}
