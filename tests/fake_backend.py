import json
import os
import tempfile
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx

from api.client import HttpClient
from db.storage import SessionStorage

Handler = Union[Callable[[httpx.Request], httpx.Response], Tuple[int, Any]]


class FakeBackend:
    """
    Route table for httpx.MockTransport. Handlers are either a callable
    taking the request or a (status, json body) tuple.
    Every request is recorded in `requests`.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Route not found"})
        if callable(handler):
            return handler(request)
        status, body = handler
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and r.url.path == path
        ]


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content or b"null")


def make_storage(temp_dir: tempfile.TemporaryDirectory) -> SessionStorage:
    return SessionStorage(os.path.join(temp_dir.name, "session.sqlite"))


def make_client(backend: FakeBackend, storage: SessionStorage) -> HttpClient:
    return HttpClient("http://backend.test", storage, transport=backend.transport)


# ---------- sample records ----------


def admin_json(role: str = "admin", **overrides) -> dict:
    data = {
        "_id": "a1",
        "name": "Ada Admin",
        "email": "ada@example.com",
        "role": role,
        "createdAt": "2024-01-02T10:00:00.000Z",
    }
    data.update(overrides)
    return data


def order_json(n: int, status: str = "ordered", **overrides) -> dict:
    data = {
        "_id": f"o{n}",
        "orderNumber": f"ORD-{n:04d}",
        "items": [{"type": "product", "productId": "p1", "quantity": 2, "price": 5.0}],
        "customerInfo": {"name": f"Customer {n}", "email": f"c{n}@example.com"},
        "subtotal": 10.0,
        "shipping": 0.0,
        "tax": 0.0,
        "total": 10.0,
        "status": status,
        "statusHistory": [
            {"status": "ordered", "updatedAt": "2024-03-01T09:00:00.000Z"}
        ],
        "createdAt": f"2024-03-{(n % 28) + 1:02d}T09:00:00.000Z",
        "updatedAt": "2024-03-01T09:00:00.000Z",
    }
    data.update(overrides)
    return data


def product_json(n: int, **overrides) -> dict:
    data = {
        "_id": f"p{n}",
        "name": f"Product {n}",
        "description": "A thing",
        "price": 9.99,
        "category": "shirts",
        "stock": 5,
        "colors": ["red"],
        "sizes": ["M"],
        "inStock": True,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-01T00:00:00.000Z",
    }
    data.update(overrides)
    return data


def page_json(items: list, page: int, limit: int, total: int) -> dict:
    return {
        "data": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": -(-total // limit),
        },
    }
