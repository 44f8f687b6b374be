from collections import defaultdict
from datetime import date
from math import ceil
from operator import attrgetter
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Literal,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from api.errors import ValidationError

T = TypeVar("T")


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [list(map(str, row)) for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(map(str, row)) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


# ---------------------------
# Pagination & search
# ---------------------------


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); zero items means zero pages."""
    if limit < 1:
        raise ValueError("limit must be positive")
    return ceil(total / limit)


def matches_search(item: Any, term: str, fields: Sequence[str]) -> bool:
    """
    Case-insensitive substring match of `term` against any of the dotted
    attribute paths in `fields` (e.g. "customer_info.name").
    An empty term matches everything.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return True
    for path in fields:
        try:
            value = attrgetter(path)(item)
        except AttributeError:
            continue
        if value is not None and needle in str(value).lower():
            return True
    return False


def paginate_locally(
    items: Sequence[T],
    page: int,
    limit: int,
    search: str = "",
    search_fields: Sequence[str] = (),
    status: Optional[str] = None,
    status_field: str = "status",
) -> Tuple[List[T], int]:
    """
    Filter the full collection the way the server would and cut out one page.

    Returns (page items, filtered total).
    """
    filtered = [
        item
        for item in items
        if matches_search(item, search, search_fields)
        and (status is None or getattr(item, status_field, None) == status)
    ]
    start = (page - 1) * limit
    return filtered[start : start + limit], len(filtered)


# ---------------------------
# Order status
# ---------------------------


def status_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def default_status_note(status: str) -> str:
    return f"Status updated to {status_label(status)}"


# ---------------------------
# Form checks (before anything is sent)
# ---------------------------

MIN_PASSWORD_LENGTH = 6


def validate_login(email: str, password: str) -> None:
    if not (email or "").strip() or not password:
        raise ValidationError("Email and password cannot be empty!")


def validate_registration(name: str, email: str, password: str, confirm: str) -> None:
    if not (name or "").strip() or not (email or "").strip() or not password:
        raise ValidationError("Please fill in all fields")
    if password != confirm:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def parse_product_form(
    name: str,
    price: str,
    category: str,
    stock: str,
    description: str = "",
    image: str = "",
    colors: str = "",
    sizes: str = "",
    in_stock: bool = True,
) -> Dict[str, Any]:
    """
    Turn raw form input into a product payload.
    name, price, category and stock are required; colors and sizes are
    comma-separated.
    """
    required = (name, price, category, stock)
    if not all((s or "").strip() for s in required):
        raise ValidationError("Please fill in all required fields")
    try:
        price_val = float(price)
    except ValueError:
        raise ValidationError("Price must be a number") from None
    try:
        stock_val = int(stock)
    except ValueError:
        raise ValidationError("Stock must be a whole number") from None
    if price_val < 0 or stock_val < 0:
        raise ValidationError("Price and stock cannot be negative")

    payload: Dict[str, Any] = {
        "name": name.strip(),
        "description": (description or "").strip(),
        "price": price_val,
        "category": category.strip(),
        "stock": stock_val,
        "colors": _split_csv(colors),
        "sizes": _split_csv(sizes),
        "inStock": in_stock,
    }
    if (image or "").strip():
        payload["image"] = image.strip()
    return payload


# ---------------------------
# Dashboard figures
# ---------------------------


def summarize_orders(orders: Iterable[Any]) -> Dict[str, Any]:
    """Headline numbers computed from a plain order list."""
    orders = list(orders)
    customers = {
        o.user_id or o.customer_info.email or o.customer_info.name for o in orders
    }
    return {
        "total_revenue": round(sum(o.total for o in orders), 2),
        "total_orders": len(orders),
        "pending_orders": sum(1 for o in orders if o.status == "ordered"),
        "shipped_orders": sum(1 for o in orders if o.status == "shipped"),
        "completed_orders": sum(1 for o in orders if o.status == "completed"),
        "unique_customers": len(customers),
    }


def recent_orders(orders: Iterable[Any], k: int = 5) -> List[Any]:
    """Newest first by creation time; orders without a timestamp sort last."""
    def key(order):
        created = order.created
        return created.timestamp() if created else float("-inf")

    return sorted(orders, key=key, reverse=True)[:k]


def daily_sales(orders: Iterable[Any], days: int = 7) -> List[Tuple[date, float, int]]:
    """(day, sales, order count) for the last `days` days that had orders."""
    buckets: Dict[date, List[float]] = defaultdict(list)
    for order in orders:
        created = order.created
        if created is None:
            continue
        buckets[created.date()].append(order.total)
    rows = [(day, round(sum(v), 2), len(v)) for day, v in sorted(buckets.items())]
    return rows[-days:]
