# app/core/principal.py

from app.core.config import settings


def get_current_principal() -> str:
    """
    Identity recorded as the seller on sales and as the user on
    inventory logs and balance adjustments.

    There is no login flow, so this is always the configured system
    principal. Swap this dependency once real users exist.
    """
    return settings.SYSTEM_PRINCIPAL_ID
