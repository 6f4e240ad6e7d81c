"""Payment provider adapters."""

from hoot.adapters.payments.base import AbstractPaymentGateway, CheckoutSession
from hoot.adapters.payments.stripe_gateway import StripePaymentGateway

__all__ = [
    "AbstractPaymentGateway",
    "CheckoutSession",
    "StripePaymentGateway",
]
