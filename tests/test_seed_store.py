import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storefront.config.settings import Settings
from storefront.data.seed_store import seed_store, SAMPLE_PRODUCTS
from storefront.services.catalog_service import CatalogService
from storefront.services.settings_service import SettingsService


def test_seed_creates_files_and_defaults(tmp_path):
    settings = Settings.load(data_dir=tmp_path)
    report = seed_store(settings, sample=False, verbose=False)

    assert report["status"] == "success"
    assert len(report["created_files"]) == 2
    assert report["default_settings_added"] == ["bulk_discount_enabled", "delivery_cost"]
    assert SettingsService(settings.settings_csv).get_all() == {
        "delivery_cost": "0",
        "bulk_discount_enabled": "false",
    }
    assert CatalogService(settings.products_csv, settings.variants_csv).list_products() == []


def test_seed_sample_catalog_once(tmp_path):
    settings = Settings.load(data_dir=tmp_path)
    report = seed_store(settings, sample=True, verbose=False)

    assert report["sample_products_added"] == len(SAMPLE_PRODUCTS)
    assert report["new_arrivals_marked"] == 2

    catalog = CatalogService(settings.products_csv, settings.variants_csv)
    products = catalog.list_products()
    assert {p.name for p in products} == {"Midnight Elegance", "Ocean Breeze"}
    assert all(p.is_new_arrival for p in products)

    # Second run leaves the existing catalog alone
    again = seed_store(settings, sample=True, verbose=False)
    assert again["created_files"] == []
    assert again["sample_products_added"] == 0
    assert len(catalog.list_products()) == 2


def test_seed_reports_failure_when_data_dir_is_unusable(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied", encoding="utf-8")
    settings = Settings.load(data_dir=blocker)

    report = seed_store(settings, sample=True, verbose=False)

    assert report["status"] == "failed"
    assert len(report["errors"]) == 1
    assert report["sample_products_added"] == 0
