# Standard library imports
from functools import lru_cache
import os

# Local application imports
from civicvoice.settings.common import CommonSettings
from civicvoice.settings.dev import DevSettings
from civicvoice.settings.production import ProductionSettings


@lru_cache
def get_settings() -> DevSettings | ProductionSettings:
    """
    Return an instance of the appropriate settings class
    based on the ENVIRONMENT environment variable.
    """
    env = os.environ.get("ENVIRONMENT", "dev").lower()
    if env == "production":
        return ProductionSettings()
    return DevSettings()


__all__ = ["CommonSettings", "DevSettings", "ProductionSettings", "get_settings"]
