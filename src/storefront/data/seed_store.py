"""
Store Seeder - creates the store data files and default settings.

Optionally loads a small sample catalog so the storefront has something
to show on a fresh checkout.
"""
import csv
from datetime import datetime
from typing import Optional

from ..config.settings import get_settings, Settings
from ..services.catalog_service import CatalogService
from ..services.settings_service import SettingsService


SAMPLE_PRODUCTS = [
    {
        "product": {
            "name": "Midnight Elegance",
            "description": "Dark amber and oud with a whisper of vanilla.",
            "image_url": "",
        },
        "variants": [
            {"size_ml": 30, "regular_price": "290.00", "bulk_price": "240.00", "bulk_min_quantity": 6, "stock_quantity": 25},
            {"size_ml": 50, "regular_price": "450.00", "bulk_price": "380.00", "bulk_min_quantity": 6, "stock_quantity": 20},
            {"size_ml": 100, "regular_price": "790.00", "stock_quantity": 8},
        ],
    },
    {
        "product": {
            "name": "Ocean Breeze",
            "description": "Sea salt, bergamot and driftwood.",
            "image_url": "",
        },
        "variants": [
            {"size_ml": 50, "regular_price": "420.00", "bulk_price": "350.00", "bulk_min_quantity": 10, "stock_quantity": 15},
            {"size_ml": 100, "regular_price": "720.00", "stock_quantity": 0},
        ],
    },
]


def _ensure_header(path, columns: list[str]) -> bool:
    """Create an empty CSV with just a header. Returns True if created."""
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        csv.DictWriter(f, fieldnames=columns).writeheader()
    return True


def seed_store(settings: Optional[Settings] = None, sample: bool = False, verbose: bool = True) -> dict:
    """
    Create missing data files, default settings and, optionally, sample products.

    Args:
        settings: Optional settings override
        sample: Load the sample catalog when the catalog is empty
        verbose: Print progress messages

    Returns:
        Seed report dictionary
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "created_files": [],
        "default_settings_added": [],
        "sample_products_added": 0,
        "new_arrivals_marked": 0,
        "errors": [],
    }

    try:
        for path, columns in (
            (settings.products_csv, CatalogService.PRODUCT_COLUMNS),
            (settings.variants_csv, CatalogService.VARIANT_COLUMNS),
        ):
            if _ensure_header(path, columns):
                report["created_files"].append(str(path))
                if verbose:
                    print(f"Created {path}")

        settings_service = SettingsService(settings.settings_csv)
        report["default_settings_added"] = settings_service.ensure_defaults()
        if verbose and report["default_settings_added"]:
            print(f"Added default settings: {', '.join(report['default_settings_added'])}")

        catalog = CatalogService(settings.products_csv, settings.variants_csv)
        if sample and not catalog.list_products():
            for entry in SAMPLE_PRODUCTS:
                catalog.create_product(entry["product"], entry["variants"])
                report["sample_products_added"] += 1
            report["new_arrivals_marked"] = catalog.mark_new_arrivals(settings.new_arrivals_count)
            if verbose:
                print(f"Loaded {report['sample_products_added']} sample products")
    except (OSError, ValueError) as e:
        msg = f"Seeding failed: {e}"
        report["errors"].append(msg)
        report["status"] = "failed"
        if verbose:
            print(f"ERROR: {msg}")
        return report

    report["status"] = "success"
    return report


if __name__ == "__main__":
    seed_store(sample=True)
