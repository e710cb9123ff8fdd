# src/api/endpoints.py
from __future__ import annotations

from typing import Any, List, Optional

from api import models
from api.client import ApiClient


def _as_list(payload: Any) -> List[dict]:
    if isinstance(payload, list):
        return [p for p in payload if isinstance(p, dict)]
    return []


def _as_dict(payload: Any) -> dict:
    return payload if isinstance(payload, dict) else {}


# ---------------------------
# Auth & Identity
# ---------------------------


async def login(client: ApiClient, email: str, password: str) -> Optional[str]:
    """Exchange email/password for a bearer token. None if the server sent no token."""
    payload = await client.post(
        "/auth/login", json={"email": email, "password": password}
    )
    token = _as_dict(payload).get("token")
    return str(token) if token else None


async def register(
    client: ApiClient, name: str, email: str, password: str, role: models.Role
) -> None:
    await client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )


async def get_profile(client: ApiClient) -> models.Profile:
    """GET /users/me. Raises ValueError if the payload carries no usable role."""
    payload = await client.get("/users/me")
    return models.Profile.from_payload(_as_dict(payload))


async def submit_vendor_application(
    client: ApiClient, shop_name: str, description: str
) -> None:
    await client.post(
        "/users/vendor-application",
        json={"shopName": shop_name, "description": description},
    )


# ---------------------------
# Catalog
# ---------------------------


async def list_products(client: ApiClient) -> List[models.Product]:
    payload = await client.get("/products")
    return [models.Product.from_payload(p) for p in _as_list(payload)]


async def get_product(client: ApiClient, product_id: int) -> models.Product:
    payload = await client.get(f"/products/{product_id}")
    return models.Product.from_payload(_as_dict(payload))


async def create_product(client: ApiClient, product: models.NewProduct) -> None:
    await client.post("/products", json=product.to_payload())


async def delete_product(client: ApiClient, product_id: int) -> None:
    await client.delete(f"/products/{product_id}")


# ---------------------------
# Inventory
# ---------------------------


async def available_stock(client: ApiClient, product_id: int) -> int:
    payload = await client.get(f"/inventory/available/{product_id}")
    return models._to_int(_as_dict(payload).get("availableStock"))


async def vendor_dashboard(client: ApiClient) -> models.DashboardStats:
    payload = await client.get("/inventory/dashboard")
    return models.DashboardStats.from_payload(_as_dict(payload))


async def my_inventory(client: ApiClient) -> List[models.InventoryItem]:
    payload = await client.get("/inventory/my-inventory")
    return [models.InventoryItem.from_payload(i) for i in _as_list(payload)]


async def restock(client: ApiClient, product_id: int, quantity: int) -> None:
    await client.put(
        f"/inventory/restock/{product_id}", params={"quantity": quantity}
    )


# ---------------------------
# Orders
# ---------------------------


async def create_order(
    client: ApiClient, draft: models.OrderDraft
) -> Optional[models.Order]:
    """Submit an order. Returns the server's order when it echoes one back."""
    payload = await client.post("/orders", json=draft.to_payload())
    if isinstance(payload, dict) and "id" in payload:
        return models.Order.from_payload(payload)
    return None


async def list_orders(client: ApiClient) -> List[models.Order]:
    payload = await client.get("/orders")
    return [models.Order.from_payload(o) for o in _as_list(payload)]


# ---------------------------
# Admin
# ---------------------------


async def list_applications(client: ApiClient) -> List[models.VendorApplication]:
    payload = await client.get("/admin/applications")
    return [models.VendorApplication.from_payload(a) for a in _as_list(payload)]


async def approve_application(client: ApiClient, application_id: int) -> None:
    await client.post(f"/admin/applications/{application_id}/approve")


async def reject_application(client: ApiClient, application_id: int) -> None:
    await client.post(f"/admin/applications/{application_id}/reject")


async def vendor_stats(client: ApiClient) -> List[models.VendorPerformance]:
    payload = await client.get("/admin/vendor-stats")
    return [models.VendorPerformance.from_payload(v) for v in _as_list(payload)]
