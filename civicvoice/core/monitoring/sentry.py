# Standard library imports
import logging

# Third-party imports
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

# Local application imports
from civicvoice.settings import CommonSettings


def setup_sentry(settings: CommonSettings) -> bool:
    """
    Initialise Sentry with the FastAPI and logging integrations.

    Only production deployments with a DSN report to Sentry. Log records of
    WARNING and above become breadcrumbs, ERROR and above become events, so
    swallowed audit-write failures still surface there.

    Returns:
        True if Sentry was initialised by this call.
    """
    if settings.ENVIRONMENT != "production" or not settings.SENTRY_DSN:
        return False

    if sentry_sdk.get_client().is_active():
        return False

    sentry_logging = LoggingIntegration(
        level=logging.WARNING,
        event_level=logging.ERROR,
    )
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[sentry_logging, FastApiIntegration()],
        environment=settings.ENVIRONMENT,
        traces_sample_rate=1.0,  # tweak for performance
    )
    return True
