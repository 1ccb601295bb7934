from __future__ import annotations

import logging
import secrets
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from .errors import InvalidArgument, InvalidTransition, NotFound, StorageFailure
from .models import ORDER_STATUSES, PAYMENT_STATUSES, MenuItem, Order, OrderItem, Restaurant, utcnow

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_TIME = "25-35 min"
TOTAL_TOLERANCE = Decimal("0.01")
CENTS = Decimal("0.01")

# Forward-only; re-setting the current status is accepted as a no-op.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "preparing": {"on-the-way", "delivered"},
    "on-the-way": {"delivered"},
    "delivered": set(),
}


# -------------------------
# Restaurant operations
# -------------------------

def list_restaurants(session: Session) -> List[Restaurant]:
    statement = select(Restaurant).order_by(col(Restaurant.rating).desc(), col(Restaurant.name).asc())
    return list(session.exec(statement))


def get_restaurant(session: Session, restaurant_id: str) -> Restaurant:
    restaurant = session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")
    return restaurant


def search_restaurants(session: Session, query: str | None) -> List[Restaurant]:
    needle = (query or "").strip().lower()
    if not needle:
        return list_restaurants(session)
    statement = (
        select(Restaurant)
        .where(
            func.lower(Restaurant.name).contains(needle, autoescape=True)
            | func.lower(func.coalesce(Restaurant.cuisine, "")).contains(needle, autoescape=True)
        )
        .order_by(col(Restaurant.rating).desc(), col(Restaurant.name).asc())
    )
    return list(session.exec(statement))


# -------------------------
# Menu operations
# -------------------------

def list_menu_items(session: Session, restaurant_id: str) -> List[MenuItem]:
    statement = (
        select(MenuItem)
        .where(MenuItem.restaurant_id == restaurant_id)
        .order_by(col(MenuItem.created_at).asc(), col(MenuItem.id).asc())
    )
    return list(session.exec(statement))


def get_menu_item(session: Session, restaurant_id: str, item_id: str) -> MenuItem:
    statement = select(MenuItem).where(MenuItem.restaurant_id == restaurant_id, MenuItem.id == item_id)
    menu_item = session.exec(statement).first()
    if menu_item is None:
        raise NotFound("Menu item not found")
    return menu_item


# -------------------------
# Order operations
# -------------------------

def generate_order_id() -> str:
    return f"ORD{secrets.token_hex(8).upper()}"


def can_transition(current: str, new: str) -> bool:
    return new == current or new in ALLOWED_TRANSITIONS.get(current, set())


def create_order(
    session: Session,
    items: Sequence[dict],
    total=None,
    user_id: str | None = None,
    payment_reference: str | None = None,
    paid_amount=None,
) -> Order:
    """Persist an order and its line items in one transaction.

    Line names and prices are snapshotted from the catalog, and the stored
    total is recomputed from them. A client-supplied ``total`` that differs
    from the recomputed one by more than a cent is rejected. When
    ``paid_amount`` is given the order is recorded as paid through
    ``payment_reference`` and the amount must cover the total.
    """
    if not items:
        raise InvalidArgument("Order must contain items")

    lines = _price_order_lines(session, items)
    computed_total = sum((line["price"] * line["quantity"] for line in lines), Decimal("0"))
    computed_total = computed_total.quantize(CENTS, rounding=ROUND_HALF_UP)

    if total is not None and abs(_to_decimal(total, "total") - computed_total) > TOTAL_TOLERANCE:
        raise InvalidArgument(f"Order total {total} does not match item total {computed_total}")
    if paid_amount is not None and _to_decimal(paid_amount, "paid amount") + TOTAL_TOLERANCE < computed_total:
        raise InvalidArgument("Paid amount does not cover the order total")
    if payment_reference and _order_for_reference(session, payment_reference) is not None:
        raise InvalidArgument("Payment reference has already been used")

    now = utcnow()
    order_id = generate_order_id()
    order = Order(
        id=order_id,
        user_id=user_id or None,
        status="preparing",
        total=computed_total,
        estimated_time=DEFAULT_ESTIMATED_TIME,
        payment_reference=payment_reference,
        payment_status="paid" if paid_amount is not None else None,
        created_at=now,
        updated_at=now,
    )
    try:
        session.add(order)
        session.flush()
        _insert_order_items(session, order, lines)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if payment_reference and _order_for_reference(session, payment_reference) is not None:
            raise InvalidArgument("Payment reference has already been used") from exc
        logger.error("Failed to create order %s: %s", order_id, exc)
        raise StorageFailure("Failed to create order") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to create order %s: %s", order_id, exc)
        raise StorageFailure("Failed to create order") from exc
    session.refresh(order)
    return order


def list_orders(session: Session, user_id: str | None = None) -> List[Order]:
    statement = select(Order).options(selectinload(Order.items))
    if user_id:
        statement = statement.where(Order.user_id == user_id)
    statement = statement.order_by(col(Order.created_at).desc(), col(Order.id).desc())
    return list(session.exec(statement))


def get_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


def update_order_status(session: Session, order_id: str, status: str) -> Order:
    if status not in ORDER_STATUSES:
        raise InvalidArgument("Invalid status")
    order = get_order(session, order_id)
    if not can_transition(order.status, status):
        raise InvalidTransition(f"Cannot move order from {order.status} to {status}")
    if order.status == status:
        return order
    order.status = status
    order.updated_at = utcnow()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


def record_payment_event(
    session: Session,
    reference: str,
    payment_status: str,
    order_id: str | None = None,
    amount=None,
) -> Tuple[Optional[Order], bool]:
    """Attach a provider payment outcome to its order.

    Returns the matched order (or ``None``) and whether anything changed.
    A paid order is never downgraded by a later failure event. A ``paid``
    outcome is only recorded when ``amount`` covers the order total, and a
    reference already held by another order is never moved.
    """
    if payment_status not in PAYMENT_STATUSES:
        raise InvalidArgument(f"Unknown payment status {payment_status}")

    order = session.get(Order, order_id) if order_id else None
    if order is None and reference:
        order = _order_for_reference(session, reference)
    if order is None:
        return None, False

    if order.payment_status == "paid":
        return order, False
    if order.payment_status == payment_status and order.payment_reference == reference:
        return order, False
    if reference and order.payment_reference != reference:
        holder = _order_for_reference(session, reference)
        if holder is not None and holder.id != order.id:
            logger.warning("Payment %s already belongs to order %s, not %s", reference, holder.id, order.id)
            return order, False
    if payment_status == "paid":
        paid = _to_decimal(amount, "paid amount") if amount is not None else Decimal("0")
        if paid + TOTAL_TOLERANCE < order.total:
            logger.warning("Payment %s of %s does not cover order %s total %s", reference, paid, order.id, order.total)
            return order, False

    order.payment_reference = reference
    order.payment_status = payment_status
    order.updated_at = utcnow()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order, True


def _price_order_lines(session: Session, items: Iterable[dict]) -> List[dict]:
    items = list(items)
    item_ids = sorted({str(item.get("id") or "") for item in items})
    statement = select(MenuItem).where(col(MenuItem.id).in_(item_ids))
    catalog = {menu_item.id: menu_item for menu_item in session.exec(statement)}

    lines = []
    for item in items:
        item_id = str(item.get("id") or "")
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise InvalidArgument(f"Quantity for item {item_id or '?'} must be a positive integer")
        menu_item = catalog.get(item_id)
        if menu_item is None:
            raise InvalidArgument(f"Unknown menu item {item_id or '?'}")
        lines.append(
            {
                "item_id": menu_item.id,
                "name": menu_item.name,
                "price": Decimal(menu_item.price).quantize(CENTS),
                "quantity": quantity,
            }
        )
    return lines


def _order_for_reference(session: Session, reference: str) -> Optional[Order]:
    return session.exec(select(Order).where(Order.payment_reference == reference)).first()


def _insert_order_items(session: Session, order: Order, lines: Iterable[dict]) -> None:
    session.add_all(OrderItem(order_id=order.id, **line) for line in lines)
    session.flush()


def _to_decimal(value, label: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidArgument(f"Invalid {label}") from exc
