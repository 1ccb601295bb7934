from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Optional

import httpx

from .errors import UpstreamFailure

logger = logging.getLogger(__name__)

PAYSTACK_BASE_URL = "https://api.paystack.co"
SIGNATURE_HEADER = "x-paystack-signature"


class PaymentError(UpstreamFailure):
    """Raised when Paystack rejects a request or cannot be reached."""


@dataclass
class InitializedTransaction:
    authorization_url: str
    access_code: str
    reference: str


@dataclass
class TransactionVerification:
    status: str
    amount: Decimal
    currency: Optional[str]
    reference: str
    paid_at: Optional[str]
    customer: Optional[dict]
    metadata: Any = None


@dataclass
class TransactionSummary:
    reference: str
    amount: Decimal
    status: str
    paid_at: Optional[str]
    customer: Optional[dict]


@dataclass
class TransactionPage:
    transactions: List[TransactionSummary]
    meta: dict = field(default_factory=dict)


@dataclass
class RefundResult:
    reference: str
    amount: Decimal
    status: str
    message: str


@dataclass
class Bank:
    id: int
    name: str
    code: str
    slug: Optional[str]


def to_minor_units(amount) -> int:
    """Naira to kobo (or any major unit to its hundredth)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount) -> Decimal:
    return (Decimal(amount or 0) / 100).quantize(Decimal("0.01"))


def compute_signature(secret_key: str, payload: bytes) -> str:
    return hmac.new(secret_key.encode(), payload, hashlib.sha512).hexdigest()


class PaystackClient:
    def __init__(
        self,
        secret_key: str,
        base_url: str = PAYSTACK_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self._http = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {secret_key}"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, default_error: str, **kwargs) -> dict:
        try:
            response = self._http.request(method, path, **kwargs)
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Paystack %s %s failed: %s", method, path, exc)
            raise PaymentError(default_error) from exc
        if not isinstance(body, dict):
            raise PaymentError(default_error)

        if response.is_error or not body.get("status"):
            message = body.get("message") or default_error
            logger.warning("Paystack %s %s rejected (%s): %s", method, path, response.status_code, message)
            raise PaymentError(message)
        return body

    def initialize_transaction(
        self,
        email: str,
        amount,
        metadata: dict | None = None,
        callback_url: str | None = None,
    ) -> InitializedTransaction:
        metadata = dict(metadata or {})
        payload = {
            "email": email,
            "amount": to_minor_units(amount),
            "metadata": metadata,
        }
        callback_url = callback_url or metadata.get("callback_url")
        if callback_url:
            payload["callback_url"] = callback_url
        body = self._request("POST", "/transaction/initialize", "Failed to initialize transaction", json=payload)
        data = body.get("data") or {}
        return InitializedTransaction(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code", ""),
            reference=data.get("reference", ""),
        )

    def verify_transaction(self, reference: str) -> TransactionVerification:
        body = self._request("GET", f"/transaction/verify/{reference}", "Verification failed")
        data = body.get("data") or {}
        return TransactionVerification(
            status=data.get("status", ""),
            amount=from_minor_units(data.get("amount")),
            currency=data.get("currency"),
            reference=data.get("reference", reference),
            paid_at=data.get("paid_at"),
            customer=data.get("customer"),
            metadata=data.get("metadata"),
        )

    def list_transactions(self, per_page: int = 50, page: int = 1) -> TransactionPage:
        body = self._request(
            "GET",
            "/transaction",
            "Failed to list transactions",
            params={"perPage": per_page, "page": page},
        )
        return TransactionPage(
            transactions=[
                TransactionSummary(
                    reference=tx.get("reference", ""),
                    amount=from_minor_units(tx.get("amount")),
                    status=tx.get("status", ""),
                    paid_at=tx.get("paid_at"),
                    customer=tx.get("customer"),
                )
                for tx in body.get("data") or []
            ],
            meta=body.get("meta") or {},
        )

    def process_refund(self, reference: str, amount=None) -> RefundResult:
        try:
            verification = self.verify_transaction(reference)
        except PaymentError as exc:
            raise PaymentError("Transaction not found") from exc
        if verification.status != "success":
            raise PaymentError("Transaction was not successful")

        payload: dict[str, Any] = {"transaction": reference}
        if amount is not None:
            payload["amount"] = to_minor_units(amount)
        body = self._request("POST", "/refund", "Failed to process refund", json=payload)
        data = body.get("data") or {}
        refunded = from_minor_units(data["amount"]) if data.get("amount") is not None else None
        return RefundResult(
            reference=reference,
            amount=refunded if refunded is not None else Decimal(str(amount or verification.amount)),
            status=data.get("status", "pending"),
            message=body.get("message") or "Refund has been queued for processing",
        )

    def list_banks(self) -> List[Bank]:
        body = self._request("GET", "/bank", "Failed to fetch banks")
        return [
            Bank(
                id=bank.get("id"),
                name=bank.get("name", ""),
                code=bank.get("code", ""),
                slug=bank.get("slug"),
            )
            for bank in body.get("data") or []
        ]

    def verify_signature(self, payload: bytes, signature: str | None) -> bool:
        if not signature or not self.secret_key:
            return False
        expected = compute_signature(self.secret_key, payload)
        return hmac.compare_digest(expected.encode(), signature.encode())
