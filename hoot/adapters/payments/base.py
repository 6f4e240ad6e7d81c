from abc import ABC, abstractmethod
from dataclasses import dataclass

from hoot.adapters.store.base import SessionUser


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str | None


class AbstractPaymentGateway(ABC):
    """Interface for payment providers that host a checkout page."""

    @abstractmethod
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
        """Create a one-off payment session for a credit package.

        Raises:
            PaymentAppError: If the provider rejects the request or is unreachable.
        """
        ...
