from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import List

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from . import crud, schemas
from .config import Settings, get_settings
from .database import build_engine, get_session, init_db, seed_sample_data
from .errors import InvalidArgument, InvalidTransition, NotFound, StorageFailure
from .payment import SIGNATURE_HEADER, PaymentError, PaystackClient, from_minor_units

logger = logging.getLogger(__name__)

router = APIRouter()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_payments(request: Request) -> PaystackClient:
    return request.app.state.payments


# -------------------------
# Health
# -------------------------

@router.get("/health", response_model=schemas.HealthResponse)
def health_check():
    return {"status": "ok", "message": "Food Delivery API is running"}


# -------------------------
# Restaurants and menus
# -------------------------

@router.get("/restaurants", response_model=List[schemas.RestaurantRead])
def list_restaurants(session: Session = Depends(get_session)):
    return crud.list_restaurants(session)


@router.get("/restaurants/search", response_model=List[schemas.RestaurantRead])
def search_restaurants(
    q: str = "",
    session: Session = Depends(get_session),
):
    return crud.search_restaurants(session, q)


@router.get("/restaurants/{restaurant_id}", response_model=schemas.RestaurantRead)
def get_restaurant(restaurant_id: str, session: Session = Depends(get_session)):
    try:
        return crud.get_restaurant(session, restaurant_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/restaurants/{restaurant_id}/menu", response_model=List[schemas.MenuItemRead])
def list_menu_items(restaurant_id: str, session: Session = Depends(get_session)):
    return crud.list_menu_items(session, restaurant_id)


@router.get("/restaurants/{restaurant_id}/menu/{item_id}", response_model=schemas.MenuItemRead)
def get_menu_item(restaurant_id: str, item_id: str, session: Session = Depends(get_session)):
    try:
        return crud.get_menu_item(session, restaurant_id, item_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


# -------------------------
# Orders
# -------------------------

@router.post("/orders", response_model=schemas.OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: schemas.OrderCreate,
    session: Session = Depends(get_session),
    payments: PaystackClient = Depends(get_payments),
):
    paid_amount = None
    if payload.payment_reference:
        try:
            verification = payments.verify_transaction(payload.payment_reference)
        except PaymentError as exc:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        if verification.status != "success":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment has not been completed",
            )
        paid_amount = verification.amount

    try:
        order = crud.create_order(
            session,
            [item.model_dump() for item in payload.items],
            total=payload.total,
            user_id=payload.user_id,
            payment_reference=payload.payment_reference,
            paid_amount=paid_amount,
        )
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    logger.info("Created order %s (%s items, total %s)", order.id, len(order.items), order.total)
    return schemas.OrderRead.from_order(order)


@router.get("/orders", response_model=List[schemas.OrderRead])
def list_orders(
    user_id: str | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
):
    return [schemas.OrderRead.from_order(order) for order in crud.list_orders(session, user_id)]


@router.get("/orders/{order_id}", response_model=schemas.OrderRead)
def get_order(order_id: str, session: Session = Depends(get_session)):
    try:
        order = crud.get_order(session, order_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return schemas.OrderRead.from_order(order)


@router.patch("/orders/{order_id}/status", response_model=schemas.OrderRead)
def update_order_status(
    order_id: str,
    payload: schemas.OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    try:
        order = crud.update_order_status(session, order_id, payload.status)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("Order %s is now %s", order.id, order.status)
    return schemas.OrderRead.from_order(order)


# -------------------------
# Payments
# -------------------------

@router.post("/initialize-payment", response_model=schemas.PaymentInitResponse)
def initialize_payment(
    payload: schemas.PaymentInitRequest,
    settings: Settings = Depends(get_app_settings),
    payments: PaystackClient = Depends(get_payments),
):
    if not payload.email or payload.amount is None or payload.amount <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and valid amount required",
        )
    metadata = {
        "orderId": payload.orderId or "",
        "itemCount": len(payload.items or []),
        "callback_url": settings.payment_callback_url,
    }
    try:
        result = payments.initialize_transaction(payload.email, payload.amount, metadata)
    except PaymentError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return schemas.PaymentInitResponse(
        authorizationUrl=result.authorization_url,
        accessCode=result.access_code,
        reference=result.reference,
    )


@router.get("/verify-payment/{reference}", response_model=schemas.PaymentVerificationRead)
def verify_payment(reference: str, payments: PaystackClient = Depends(get_payments)):
    try:
        return payments.verify_transaction(reference)
    except PaymentError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/transactions", response_model=schemas.TransactionListResponse)
def list_transactions(
    per_page: int = Query(default=50, alias="perPage", ge=1),
    page: int = Query(default=1, ge=1),
    payments: PaystackClient = Depends(get_payments),
):
    try:
        return payments.list_transactions(per_page=per_page, page=page)
    except PaymentError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.post("/refund", response_model=schemas.RefundRead)
def refund(payload: schemas.RefundRequest, payments: PaystackClient = Depends(get_payments)):
    if not payload.reference:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Transaction reference required",
        )
    try:
        result = payments.process_refund(payload.reference, payload.amount)
    except PaymentError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    logger.info("Refund for %s is %s", result.reference, result.status)
    return result


@router.get("/banks", response_model=schemas.BankListResponse)
def list_banks(payments: PaystackClient = Depends(get_payments)):
    try:
        return {"banks": payments.list_banks()}
    except PaymentError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.post("/webhook", response_model=schemas.WebhookAck)
async def paystack_webhook(
    request: Request,
    session: Session = Depends(get_session),
    payments: PaystackClient = Depends(get_payments),
):
    payload = await request.body()
    if not payments.verify_signature(payload, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")
    try:
        event = json.loads(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload") from exc
    if not isinstance(event, dict) or not isinstance(event.get("data") or {}, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

    await run_in_threadpool(_handle_payment_event, session, event)
    return {"received": True}


def _handle_payment_event(session: Session, event: dict) -> None:
    event_type = event.get("event")
    data = event.get("data") or {}
    reference = data.get("reference") or ""
    metadata = data.get("metadata")
    order_id = metadata.get("orderId") if isinstance(metadata, dict) else None

    if event_type == "charge.success":
        payment_status = "paid"
    elif event_type == "charge.failed":
        payment_status = "failed"
    else:
        logger.info("Unhandled webhook event type: %s", event_type)
        return

    if not reference and not order_id:
        logger.warning("Webhook %s carried neither reference nor order id", event_type)
        return

    try:
        amount = from_minor_units(data.get("amount"))
    except (ArithmeticError, TypeError, ValueError):
        logger.warning("Webhook %s for %s carried an unreadable amount", event_type, reference)
        amount = None

    order, changed = crud.record_payment_event(
        session,
        reference,
        payment_status,
        order_id=order_id or None,
        amount=amount,
    )
    if order is None:
        logger.warning("Webhook %s for %s matched no order", event_type, reference)
    elif changed:
        logger.info("Order %s marked %s by payment %s", order.id, payment_status, reference)
    else:
        logger.info("Webhook %s for order %s already recorded", event_type, order.id)


# -------------------------
# Application
# -------------------------

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    payments: PaystackClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    owns_engine = engine is None
    owns_payments = payments is None
    engine = engine or build_engine(settings)
    payments = payments or PaystackClient(settings.paystack_secret_key, base_url=settings.paystack_base_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        with Session(engine) as session:
            seed_sample_data(session)
        yield
        if owns_payments:
            payments.close()
        if owns_engine:
            engine.dispose()

    app = FastAPI(title="Food Delivery API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.payments = payments

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.include_router(router, prefix="/api")
    return app


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "food_delivery.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
