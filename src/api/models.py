# provide dataclass models for API payloads

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

Role = Literal["CUSTOMER", "VENDOR", "ADMIN"]
ROLES = ("CUSTOMER", "VENDOR", "ADMIN")

ApplicationStatus = Literal["PENDING", "APPROVED", "REJECTED"]

CATEGORIES = ("YARN", "CROCHET_HOOKS", "KNITTING_NEEDLES", "ACCESSORIES", "TOOLS")


def _to_int(val, default: int = 0) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        return default


def _to_float(val, default: float = 0.0) -> float:
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def _to_str(val) -> str:
    return "" if val is None else str(val)


def parse_timestamp(val) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or epoch seconds into an aware datetime.
    Naive values are taken as UTC. Unparsable values give None.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return datetime.fromtimestamp(val, tz=timezone.utc)
    try:
        ts = datetime.fromisoformat(str(val).replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class Identity:
    id: int
    name: str
    email: str
    role: Role

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Identity":
        role = _to_str(data.get("role")).upper()
        if role not in ROLES:
            raise ValueError(f"Unknown role {data.get('role')!r}")
        return cls(
            id=_to_int(data.get("id")),
            name=_to_str(data.get("name")),
            email=_to_str(data.get("email")),
            role=role,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class Profile:
    """/users/me: the identity plus the vendor application fields."""

    identity: Identity
    application_status: Optional[str]
    approved: bool
    shop_name: str = ""
    shop_description: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Profile":
        status = data.get("applicationStatus")
        # the backend serializes isApproved as "approved"
        approved = data.get("approved", data.get("isApproved"))
        return cls(
            identity=Identity.from_payload(data),
            application_status=str(status).upper() if status else None,
            approved=approved is True,
            shop_name=_to_str(data.get("shopName")),
            shop_description=_to_str(data.get("shopDescription")),
        )


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    description: str = ""
    category: str = ""
    vendor_name: str = ""
    image_url: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            id=_to_int(data.get("id")),
            name=_to_str(data.get("name")),
            price=_to_float(data.get("price")),
            description=_to_str(data.get("description")),
            category=_to_str(data.get("category")),
            vendor_name=_to_str(data.get("vendorName")),
            image_url=_to_str(data.get("imageUrl")),
        )


@dataclass(frozen=True)
class NewProduct:
    name: str
    description: str
    price: float
    stock_quantity: int
    category: str = "YARN"
    image_url: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "stockQuantity": self.stock_quantity,
            "category": self.category,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True)
class InventoryItem:
    product_id: int
    product_name: str
    unit_price: float
    stock_quantity: int
    status: str  # IN_STOCK | LOW_STOCK | OUT_OF_STOCK, computed by the server

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "InventoryItem":
        return cls(
            product_id=_to_int(data.get("productId")),
            product_name=_to_str(data.get("productName")),
            unit_price=_to_float(data.get("unitPrice")),
            stock_quantity=_to_int(data.get("stockQuantity")),
            status=_to_str(data.get("status")),
        )


@dataclass(frozen=True)
class DashboardStats:
    potential_revenue: float = 0.0
    total_sold: int = 0
    active_products: int = 0
    low_stock_count: int = 0

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "DashboardStats":
        return cls(
            potential_revenue=_to_float(data.get("potentialRevenue")),
            total_sold=_to_int(data.get("totalSold")),
            active_products=_to_int(data.get("activeProducts")),
            low_stock_count=_to_int(data.get("lowStockCount")),
        )


@dataclass(frozen=True)
class VendorApplication:
    id: int
    shop_name: str
    description: str
    status: str
    created_at: Optional[datetime] = None
    applicant_name: str = ""
    applicant_email: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "VendorApplication":
        user = data.get("user")
        if not isinstance(user, dict):
            user = {}
        return cls(
            id=_to_int(data.get("id")),
            shop_name=_to_str(data.get("shopName")),
            description=_to_str(data.get("description")),
            status=_to_str(data.get("status")).upper(),
            created_at=parse_timestamp(data.get("createdAt")),
            applicant_name=_to_str(user.get("name")),
            applicant_email=_to_str(user.get("email")),
        )


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    quantity: int
    price: float
    product_name: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "OrderItem":
        product = data.get("product")
        if not isinstance(product, dict):
            product = {}
        return cls(
            product_id=_to_int(data.get("productId", product.get("id"))),
            quantity=_to_int(data.get("quantity")),
            price=_to_float(data.get("price", data.get("priceAtPurchase"))),
            product_name=_to_str(product.get("name") or data.get("productName")),
        )


@dataclass(frozen=True)
class OrderDraft:
    """What the client submits to POST /orders."""

    user_id: int
    shipping_address: str
    phone: str
    items: List[OrderItem]
    total_amount: float

    def to_payload(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "shippingAddress": self.shipping_address,
            "phone": self.phone,
            "items": [
                {"productId": i.product_id, "quantity": i.quantity, "price": i.price}
                for i in self.items
            ],
            "totalAmount": self.total_amount,
        }


@dataclass(frozen=True)
class Order:
    id: int
    shipping_address: str
    phone: str
    total_amount: float
    status: str = ""
    order_date: Optional[datetime] = None
    items: List[OrderItem] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=_to_int(data.get("id")),
            shipping_address=_to_str(data.get("shippingAddress")),
            phone=_to_str(data.get("phone")),
            total_amount=_to_float(data.get("totalAmount")),
            status=_to_str(data.get("status")),
            order_date=parse_timestamp(data.get("orderDate")),
            items=[OrderItem.from_payload(i) for i in data.get("items") or []],
        )


@dataclass(frozen=True)
class VendorPerformance:
    vendor_id: int
    vendor_name: str
    shop_name: str
    total_products: int
    total_sold: int
    total_revenue: float

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "VendorPerformance":
        return cls(
            vendor_id=_to_int(data.get("vendorId")),
            vendor_name=_to_str(data.get("vendorName")),
            shop_name=_to_str(data.get("shopName")),
            total_products=_to_int(data.get("totalProducts")),
            total_sold=_to_int(data.get("totalSold")),
            total_revenue=_to_float(data.get("totalRevenue")),
        )
