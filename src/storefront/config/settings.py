"""
Centralized settings and path configuration for the storefront.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Store data files
    data_dir: Path
    products_csv: Path
    variants_csv: Path
    settings_csv: Path

    # Hosted checkout
    stripe_secret_key: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    currency: str = "zar"
    public_base_url: str = "http://localhost:8501"
    shipping_countries: tuple = ('ZA',)

    log_level: str = "INFO"

    # Products flagged by the new-arrivals migration
    new_arrivals_count: int = 2

    request_timeout: float = 30.0

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment."""
        root = data_dir or Path(os.getenv('STORE_DATA_DIR') or get_project_root() / 'data')
        countries = os.getenv('SHIPPING_COUNTRIES', 'ZA')

        return cls(
            data_dir=root,
            products_csv=root / 'products.csv',
            variants_csv=root / 'product_variants.csv',
            settings_csv=root / 'settings.csv',
            stripe_secret_key=os.getenv('STRIPE_SECRET_KEY', ''),
            stripe_api_base=os.getenv('STRIPE_API_BASE', 'https://api.stripe.com').rstrip('/'),
            currency=os.getenv('STORE_CURRENCY', 'zar').strip().lower(),
            public_base_url=os.getenv('PUBLIC_BASE_URL', 'http://localhost:8501').rstrip('/'),
            shipping_countries=tuple(c.strip().upper() for c in countries.split(',') if c.strip()),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def configure_logging(level: Optional[str] = None):
    """Configure root logging once for the API and UI entry points."""
    logging.basicConfig(
        level=(level or get_settings().log_level),
        format=LOG_FORMAT,
    )
