"""
Shared service instances for the API routers.

Built lazily from the global settings; reset() swaps in a fresh set,
which is how tests point the API at a temporary data directory.
"""
from typing import Optional

from ..config.settings import Settings, get_settings
from ..services.catalog_service import CatalogService
from ..services.checkout_service import CheckoutService
from ..services.settings_service import SettingsService

_settings: Optional[Settings] = None
_catalog_service: Optional[CatalogService] = None
_settings_service: Optional[SettingsService] = None
_checkout_service: Optional[CheckoutService] = None


def reset(settings: Optional[Settings] = None):
    """(Re)build every service from the given settings."""
    global _settings, _catalog_service, _settings_service, _checkout_service
    _settings = settings or get_settings()
    _catalog_service = CatalogService(_settings.products_csv, _settings.variants_csv)
    _settings_service = SettingsService(_settings.settings_csv)
    _checkout_service = CheckoutService(_settings_service, settings=_settings)


def _ensure():
    if _settings is None:
        reset()


def get_app_settings() -> Settings:
    _ensure()
    return _settings


def get_catalog_service() -> CatalogService:
    _ensure()
    return _catalog_service


def get_settings_service() -> SettingsService:
    _ensure()
    return _settings_service


def get_checkout_service() -> CheckoutService:
    _ensure()
    return _checkout_service
