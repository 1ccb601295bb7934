"""HTTP client for the food delivery API.

The server owns orders. The client keeps a read-through copy of the order
list per user and drops it after any request that changes an order.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

from .cart import Cart

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class FoodDeliveryClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, http_client: httpx.Client | None = None) -> None:
        self._http = http_client or httpx.Client(base_url=base_url, timeout=10)
        self._orders_cache: Dict[Optional[str], List[dict]] = {}

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, **kwargs):
        response = self._http.request(method, f"/api{path}", **kwargs)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail", response.reason_phrase) if isinstance(body, dict) else response.reason_phrase
            logger.warning("%s %s failed with %s: %s", method, path, response.status_code, detail)
            raise ApiError(response.status_code, str(detail))
        return response.json()

    # Catalog

    def list_restaurants(self) -> List[dict]:
        return self._request("GET", "/restaurants")

    def get_restaurant(self, restaurant_id: str) -> dict:
        return self._request("GET", f"/restaurants/{restaurant_id}")

    def search_restaurants(self, query: str) -> List[dict]:
        return self._request("GET", "/restaurants/search", params={"q": query})

    def get_menu(self, restaurant_id: str) -> List[dict]:
        return self._request("GET", f"/restaurants/{restaurant_id}/menu")

    def get_menu_item(self, restaurant_id: str, item_id: str) -> dict:
        return self._request("GET", f"/restaurants/{restaurant_id}/menu/{item_id}")

    # Orders

    def invalidate_orders(self) -> None:
        self._orders_cache.clear()

    def orders(self, user_id: str | None = None) -> List[dict]:
        if user_id not in self._orders_cache:
            params = {"userId": user_id} if user_id else None
            self._orders_cache[user_id] = self._request("GET", "/orders", params=params)
        return self._orders_cache[user_id]

    def get_order(self, order_id: str) -> dict:
        return self._request("GET", f"/orders/{order_id}")

    def create_order(
        self,
        items: List[dict],
        total,
        user_id: str | None = None,
        payment_reference: str | None = None,
    ) -> dict:
        payload = {"items": items, "total": float(total)}
        if user_id:
            payload["userId"] = user_id
        if payment_reference:
            payload["paymentReference"] = payment_reference
        try:
            return self._request("POST", "/orders", json=payload)
        finally:
            self.invalidate_orders()

    def update_order_status(self, order_id: str, status: str) -> dict:
        try:
            return self._request("PATCH", f"/orders/{order_id}/status", json={"status": status})
        finally:
            self.invalidate_orders()

    def checkout(
        self,
        cart: Cart,
        user_id: str | None = None,
        payment_reference: str | None = None,
    ) -> dict:
        """Place the cart as an order on the server and empty the cart."""
        if cart.is_empty:
            raise ValueError("Cart is empty")
        order = self.create_order(
            cart.as_order_items(),
            cart.total,
            user_id=user_id,
            payment_reference=payment_reference,
        )
        cart.clear()
        return order

    # Payments

    def initialize_payment(self, email: str, amount, order_id: str | None = None, items: List[dict] | None = None) -> dict:
        payload = {"email": email, "amount": float(amount), "orderId": order_id, "items": items or []}
        return self._request("POST", "/initialize-payment", json=payload)

    def verify_payment(self, reference: str) -> dict:
        return self._request("GET", f"/verify-payment/{reference}")
