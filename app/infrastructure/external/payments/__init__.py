"""Payment processor (Stripe Connect) account provisioning."""

from app.infrastructure.external.payments.stripe_connect import StripeConnectClient, flatten_form

__all__ = ["StripeConnectClient", "flatten_form"]
