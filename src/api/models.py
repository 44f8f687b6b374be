# record types for everything the backend sends back, checked on receipt
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from api.errors import ResponseShapeError
from utils.pure import total_pages

T = TypeVar("T")

ORDER_STATUSES: Tuple[str, ...] = ("ordered", "shipped", "completed")
ADMIN_ROLES = frozenset({"admin", "super_admin"})

_MISSING = object()


def _object(data: Any, record: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseShapeError(
            f"Malformed {record}: expected an object, got {type(data).__name__}"
        )
    return data


def _get(data: Dict[str, Any], key: str, kind, record: str, default=_MISSING):
    """Fetch `key` from a decoded JSON object and check its type.

    Numbers are accepted for float fields; bools never pass as numbers.
    """
    val = data.get(key)
    if val is None:
        if default is _MISSING:
            raise ResponseShapeError(f"Malformed {record}: missing '{key}'")
        return default
    if kind is float:
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise ResponseShapeError(f"Malformed {record}: '{key}' is not a number")
        return float(val)
    if kind is int and isinstance(val, bool):
        raise ResponseShapeError(f"Malformed {record}: '{key}' is not an integer")
    if not isinstance(val, kind):
        raise ResponseShapeError(f"Malformed {record}: unexpected type for '{key}'")
    return val


def _get_id(data: Dict[str, Any], record: str) -> str:
    # mongo style "_id" first, plain "id" otherwise
    val = data.get("_id", data.get("id"))
    if val is None:
        raise ResponseShapeError(f"Malformed {record}: missing '_id'")
    return str(val)


def parse_list(data: Any, parse: Callable[[Any], T], record: str) -> List[T]:
    if not isinstance(data, list):
        raise ResponseShapeError(
            f"Malformed {record} list: expected an array, got {type(data).__name__}"
        )
    return [parse(item) for item in data]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


# ---------------------------
# Accounts
# ---------------------------


@dataclass(frozen=True)
class AdminUser:
    id: str
    name: str
    email: str
    role: str  # "admin" or "super_admin" for anybody allowed in
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @classmethod
    def from_json(cls, data: Any) -> AdminUser:
        data = _object(data, "admin")
        return cls(
            id=_get_id(data, "admin"),
            name=_get(data, "name", str, "admin"),
            email=_get(data, "email", str, "admin"),
            role=_get(data, "role", str, "admin", default=""),
            created_at=_get(data, "createdAt", str, "admin", default=None),
            updated_at=_get(data, "updatedAt", str, "admin", default=None),
        )


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> User:
        data = _object(data, "user")
        return cls(
            id=_get_id(data, "user"),
            name=_get(data, "name", str, "user"),
            email=_get(data, "email", str, "user"),
            role=_get(data, "role", str, "user", default=None),
        )


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: AdminUser | User

    @classmethod
    def from_admin_json(cls, data: Any) -> AuthResult:
        data = _object(data, "admin auth response")
        return cls(
            token=_get(data, "adminToken", str, "admin auth response"),
            user=AdminUser.from_json(data.get("admin")),
        )

    @classmethod
    def from_user_json(cls, data: Any) -> AuthResult:
        data = _object(data, "auth response")
        return cls(
            token=_get(data, "token", str, "auth response"),
            user=User.from_json(data.get("user")),
        )


# ---------------------------
# Orders
# ---------------------------


@dataclass(frozen=True)
class OrderItem:
    type: str
    quantity: int
    price: float
    product_id: Optional[str] = None
    custom_id: Optional[str] = None
    customizations: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> OrderItem:
        data = _object(data, "order item")
        return cls(
            type=_get(data, "type", str, "order item", default="product"),
            quantity=_get(data, "quantity", int, "order item"),
            price=_get(data, "price", float, "order item"),
            product_id=_get(data, "productId", str, "order item", default=None),
            custom_id=_get(data, "customId", str, "order item", default=None),
            customizations=_get(data, "customizations", dict, "order item", {}),
        )


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> CustomerInfo:
        data = _object(data, "customer info")
        return cls(
            name=_get(data, "name", str, "customer info"),
            email=_get(data, "email", str, "customer info", default=""),
            phone=_get(data, "phone", str, "customer info", default=None),
            address=_get(data, "address", str, "customer info", default=None),
        )


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: str
    updated_at: str
    note: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> StatusHistoryEntry:
        data = _object(data, "status history entry")
        return cls(
            status=_get(data, "status", str, "status history entry"),
            updated_at=str(data.get("updatedAt") or ""),
            note=_get(data, "note", str, "status history entry", default=None),
        )


@dataclass(frozen=True)
class Order:
    id: str
    order_number: str
    items: List[OrderItem]
    customer_info: CustomerInfo
    subtotal: float
    shipping: float
    tax: float
    total: float
    status: str  # one of ORDER_STATUSES
    status_history: List[StatusHistoryEntry]
    created_at: str
    updated_at: str
    user_id: Optional[str] = None

    @property
    def created(self) -> Optional[datetime]:
        return parse_timestamp(self.created_at)

    @classmethod
    def from_json(cls, data: Any) -> Order:
        data = _object(data, "order")
        status = _get(data, "status", str, "order")
        if status not in ORDER_STATUSES:
            raise ResponseShapeError(f"Malformed order: unknown status '{status}'")
        return cls(
            id=_get_id(data, "order"),
            order_number=str(_get(data, "orderNumber", (str, int), "order")),
            items=parse_list(data.get("items", []), OrderItem.from_json, "order item"),
            customer_info=CustomerInfo.from_json(data.get("customerInfo")),
            subtotal=_get(data, "subtotal", float, "order", default=0.0),
            shipping=_get(data, "shipping", float, "order", default=0.0),
            tax=_get(data, "tax", float, "order", default=0.0),
            total=_get(data, "total", float, "order"),
            status=status,
            status_history=parse_list(
                data.get("statusHistory") or [],
                StatusHistoryEntry.from_json,
                "status history",
            ),
            created_at=_get(data, "createdAt", str, "order", default=""),
            updated_at=_get(data, "updatedAt", str, "order", default=""),
            user_id=_get(data, "userId", str, "order", default=None),
        )


# ---------------------------
# Products
# ---------------------------


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: float
    category: str
    stock: int
    colors: List[str]
    sizes: List[str]
    in_stock: bool
    created_at: str
    updated_at: str
    image: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Product:
        data = _object(data, "product")
        stock = _get(data, "stock", int, "product", default=0)
        return cls(
            id=_get_id(data, "product"),
            name=_get(data, "name", str, "product"),
            description=_get(data, "description", str, "product", default=""),
            price=_get(data, "price", float, "product"),
            category=_get(data, "category", str, "product", default=""),
            stock=stock,
            colors=_get(data, "colors", list, "product", default=[]),
            sizes=_get(data, "sizes", list, "product", default=[]),
            in_stock=_get(data, "inStock", bool, "product", default=stock > 0),
            created_at=_get(data, "createdAt", str, "product", default=""),
            updated_at=_get(data, "updatedAt", str, "product", default=""),
            image=_get(data, "image", str, "product", default=None),
        )

    def to_payload(self) -> Dict[str, Any]:
        """camelCase body for create / update."""
        payload = {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "stock": self.stock,
            "colors": list(self.colors),
            "sizes": list(self.sizes),
            "inStock": self.in_stock,
        }
        if self.image:
            payload["image"] = self.image
        return payload


# ---------------------------
# Pagination & dashboard
# ---------------------------


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def of(cls, page: int, limit: int, total: int) -> Pagination:
        return cls(
            page=page, limit=limit, total=total, total_pages=total_pages(total, limit)
        )

    @classmethod
    def from_json(cls, data: Any) -> Pagination:
        data = _object(data, "pagination")
        page = _get(data, "page", int, "pagination")
        limit = _get(data, "limit", int, "pagination")
        total = _get(data, "total", int, "pagination")
        if page < 1 or limit < 1 or total < 0:
            raise ResponseShapeError("Malformed pagination: out of range values")
        # totalPages is derived, never trusted
        return cls.of(page, limit, total)


@dataclass(frozen=True)
class PaginatedResponse(Generic[T]):
    data: List[T]
    pagination: Pagination

    @classmethod
    def from_json(
        cls, data: Any, parse_item: Callable[[Any], T]
    ) -> PaginatedResponse[T]:
        data = _object(data, "paginated response")
        if "data" not in data or "pagination" not in data:
            raise ResponseShapeError(
                "Malformed paginated response: expected 'data' and 'pagination'"
            )
        pagination = Pagination.from_json(data["pagination"])
        items = parse_list(data["data"], parse_item, "paginated")
        if len(items) > pagination.limit:
            raise ResponseShapeError(
                "Malformed paginated response: more items than the page limit"
            )
        return cls(data=items, pagination=pagination)


@dataclass(frozen=True)
class MonthlyRevenue:
    month: str
    revenue: float

    @classmethod
    def from_json(cls, data: Any) -> MonthlyRevenue:
        data = _object(data, "monthly revenue")
        return cls(
            month=str(_get(data, "month", (str, int), "monthly revenue")),
            revenue=_get(data, "revenue", float, "monthly revenue"),
        )


@dataclass(frozen=True)
class DashboardStats:
    total_orders: int
    total_revenue: float
    total_users: int
    recent_orders: List[Order]
    monthly_revenue: List[MonthlyRevenue]

    @classmethod
    def from_json(cls, data: Any) -> DashboardStats:
        data = _object(data, "dashboard stats")
        return cls(
            total_orders=_get(data, "totalOrders", int, "dashboard stats", default=0),
            total_revenue=_get(
                data, "totalRevenue", float, "dashboard stats", default=0.0
            ),
            total_users=_get(data, "totalUsers", int, "dashboard stats", default=0),
            recent_orders=parse_list(
                data.get("recentOrders") or [], Order.from_json, "recent order"
            ),
            monthly_revenue=parse_list(
                data.get("monthlyRevenue") or [],
                MonthlyRevenue.from_json,
                "monthly revenue",
            ),
        )
