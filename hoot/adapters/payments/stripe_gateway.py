"""Stripe Checkout adapter."""

import logging

import stripe
from fastapi.concurrency import run_in_threadpool

from hoot.adapters.payments.base import AbstractPaymentGateway, CheckoutSession
from hoot.adapters.store.base import SessionUser
from hoot.core.errors import PaymentAppError

logger = logging.getLogger(__name__)


def to_cents(price: float) -> int:
    return int(round(price * 100))


class StripePaymentGateway(AbstractPaymentGateway):
    """Creates hosted Checkout sessions with the official Stripe SDK.

    The SDK is synchronous, so calls run in the threadpool.
    """

    def __init__(self, api_key: str, currency: str = "usd") -> None:
        self.api_key = api_key
        self.currency = currency

    async def create_checkout_session(
        self,
        *,
        user: SessionUser,
        credits: int,
        price: float,
        package_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        params = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {
                            "name": f"{credits} Credits",
                            "description": f"Purchase {credits} credits for your Hoot account",
                        },
                        "unit_amount": to_cents(price),
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": user.id,
            "metadata": {
                "userId": user.id,
                "credits": str(credits),
                "packageId": package_id,
                "price": str(price),
            },
        }
        if user.email:
            params["customer_email"] = user.email

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                api_key=self.api_key,
                **params,
            )
        except stripe.StripeError as exc:
            logger.error(
                "payments.checkout_failed",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                    "package_id": package_id,
                },
            )
            raise PaymentAppError(
                code="checkout_failed",
                message="Failed to create checkout session",
            ) from exc

        return CheckoutSession(id=session.id, url=session.url)
