"""
Catalog Service - CRUD operations for products and their size variants.
Handles reading/writing products.csv and product_variants.csv.
"""
import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Optional
from uuid import uuid4

import pandas as pd

from ..engine.models import Product, ProductVariant, parse_decimal

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_bool(value) -> bool:
    return str(value).strip().lower() == 'true'


def _to_int(value, default: int = 0) -> int:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default


@dataclass
class ValidationResult:
    """Result of product validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class CatalogService:
    """Service for managing the product catalog."""

    PRODUCT_COLUMNS = [
        'id', 'name', 'description', 'image_url', 'is_new_arrival',
        'created_at', 'updated_at'
    ]
    VARIANT_COLUMNS = [
        'id', 'product_id', 'size_ml', 'regular_price', 'bulk_price',
        'bulk_min_quantity', 'stock_quantity'
    ]

    def __init__(self, products_csv_path: Path, variants_csv_path: Path):
        self.products_csv_path = Path(products_csv_path)
        self.variants_csv_path = Path(variants_csv_path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read_frame(self, path: Path, columns: list[str]) -> pd.DataFrame:
        if not path.exists():
            return pd.DataFrame(columns=columns)
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        for col in columns:
            if col not in df.columns:
                df[col] = ''
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        return df[columns]

    @staticmethod
    def _variant_from_row(row: dict) -> ProductVariant:
        bulk_raw = row.get('bulk_price', '')
        return ProductVariant(
            id=row['id'],
            size_ml=_to_int(row.get('size_ml')),
            regular_price=parse_decimal(row.get('regular_price')),
            bulk_price=parse_decimal(bulk_raw, default=None),
            bulk_min_quantity=max(1, _to_int(row.get('bulk_min_quantity'), 1)),
            stock_quantity=max(0, _to_int(row.get('stock_quantity'))),
        )

    def list_products(self, in_stock_only: bool = False) -> list[Product]:
        """
        List products with nested variants, newest first.

        With in_stock_only, products without a single variant in stock
        are left out.
        """
        products_df = self._read_frame(self.products_csv_path, self.PRODUCT_COLUMNS)
        variants_df = self._read_frame(self.variants_csv_path, self.VARIANT_COLUMNS)

        variants_by_product: dict[str, list[ProductVariant]] = {}
        for row in variants_df.to_dict(orient='records'):
            if not row['id']:
                continue
            variants_by_product.setdefault(row['product_id'], []).append(self._variant_from_row(row))

        # Reverse first so rows sharing a timestamp still come out newest first
        products_df = products_df[products_df['id'] != ''].iloc[::-1]
        products_df = products_df.sort_values('created_at', ascending=False, kind='stable')

        products = []
        for row in products_df.to_dict(orient='records'):
            product = Product(
                id=row['id'],
                name=row['name'],
                description=row['description'],
                image_url=row['image_url'],
                variants=tuple(variants_by_product.get(row['id'], [])),
                is_new_arrival=_to_bool(row['is_new_arrival']),
                created_at=row['created_at'] or None,
                updated_at=row['updated_at'] or None,
            )
            if in_stock_only and not product.in_stock:
                continue
            products.append(product)
        return products

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a single product by ID."""
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_product(self, product: dict, variants: list[dict]) -> Product:
        """Create a product and its variants."""
        validation = self.validate_product(product, variants)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        product_id = str(uuid4())
        timestamp = _now()
        rows = self._load_rows(self.products_csv_path, self.PRODUCT_COLUMNS)
        rows.append(self._product_row(product_id, product, created_at=timestamp, updated_at=timestamp))
        self._write_rows(self.products_csv_path, self.PRODUCT_COLUMNS, rows)

        variant_rows = self._load_rows(self.variants_csv_path, self.VARIANT_COLUMNS)
        variant_rows.extend(self._variant_row(product_id, v) for v in variants or [])
        self._write_rows(self.variants_csv_path, self.VARIANT_COLUMNS, variant_rows)

        logger.info("Created product %s (%s) with %d variants", product_id, product.get('name'), len(variants or []))
        return self.get_product(product_id)

    def update_product(self, product_id: str, product: dict, variants: list[dict]) -> Product:
        """Update a product and replace its variant list wholesale."""
        validation = self.validate_product(product, variants)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        rows = self._load_rows(self.products_csv_path, self.PRODUCT_COLUMNS)
        found = False
        for i, row in enumerate(rows):
            if row['id'] == product_id:
                rows[i] = self._product_row(
                    product_id, product,
                    created_at=row.get('created_at') or _now(),
                    updated_at=_now(),
                )
                found = True
                break

        if not found:
            raise ValueError(f"Product with ID '{product_id}' not found")

        self._write_rows(self.products_csv_path, self.PRODUCT_COLUMNS, rows)

        variant_rows = [
            r for r in self._load_rows(self.variants_csv_path, self.VARIANT_COLUMNS)
            if r['product_id'] != product_id
        ]
        variant_rows.extend(self._variant_row(product_id, v) for v in variants or [])
        self._write_rows(self.variants_csv_path, self.VARIANT_COLUMNS, variant_rows)

        logger.info("Updated product %s", product_id)
        return self.get_product(product_id)

    def delete_product(self, product_id: str) -> bool:
        """Delete a product; its variants go with it."""
        rows = self._load_rows(self.products_csv_path, self.PRODUCT_COLUMNS)
        remaining = [r for r in rows if r['id'] != product_id]

        if len(remaining) == len(rows):
            raise ValueError(f"Product with ID '{product_id}' not found")

        self._write_rows(self.products_csv_path, self.PRODUCT_COLUMNS, remaining)
        variant_rows = [
            r for r in self._load_rows(self.variants_csv_path, self.VARIANT_COLUMNS)
            if r['product_id'] != product_id
        ]
        self._write_rows(self.variants_csv_path, self.VARIANT_COLUMNS, variant_rows)

        logger.info("Deleted product %s", product_id)
        return True

    def mark_new_arrivals(self, limit: int = 2) -> int:
        """Flag the first `limit` products in file order as new arrivals."""
        rows = self._load_rows(self.products_csv_path, self.PRODUCT_COLUMNS)
        flagged = rows[:max(0, limit)]
        for row in flagged:
            row['is_new_arrival'] = 'true'
            row['updated_at'] = _now()
        if flagged:
            self._write_rows(self.products_csv_path, self.PRODUCT_COLUMNS, rows)
        logger.info("Marked %d products as new arrivals", len(flagged))
        return len(flagged)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_product(self, product: dict, variants: list[dict]) -> ValidationResult:
        """Validate a product and its variants before saving."""
        result = ValidationResult(valid=True)

        if not (product.get('name') or '').strip():
            result.errors.append("Name is required")
            result.valid = False

        if not variants:
            result.warnings.append("Product has no size variants and cannot be sold")

        seen_sizes = set()
        for i, variant in enumerate(variants or [], start=1):
            label = f"Variant {i}"
            size = _to_int(variant.get('size_ml'), 0)
            if size <= 0:
                result.errors.append(f"{label}: size_ml must be a positive integer")
                result.valid = False
            elif size in seen_sizes:
                result.errors.append(f"{label}: duplicate size {size}ml")
                result.valid = False
            seen_sizes.add(size)

            regular = parse_decimal(variant.get('regular_price'), default=Decimal("-1"))
            if regular < 0:
                result.errors.append(f"{label}: regular_price must be a non-negative number")
                result.valid = False

            bulk_raw = variant.get('bulk_price')
            if bulk_raw not in (None, ''):
                bulk = parse_decimal(bulk_raw, default=Decimal("-1"))
                if bulk < 0:
                    result.errors.append(f"{label}: bulk_price must be a non-negative number")
                    result.valid = False
                elif regular >= 0 and bulk > regular:
                    result.errors.append(f"{label}: bulk_price cannot exceed regular_price")
                    result.valid = False
                if _to_int(variant.get('bulk_min_quantity'), 0) < 1:
                    result.errors.append(f"{label}: bulk_min_quantity must be at least 1")
                    result.valid = False

            if _to_int(variant.get('stock_quantity', 0), -1) < 0:
                result.errors.append(f"{label}: stock_quantity must be a non-negative integer")
                result.valid = False

        return result

    def get_stats(self) -> dict:
        """Get statistics about the catalog."""
        products = self.list_products()
        variants = [v for p in products for v in p.variants]
        return {
            'products': len(products),
            'in_stock_products': sum(1 for p in products if p.in_stock),
            'variants': len(variants),
            'sold_out_variants': sum(1 for v in variants if not v.in_stock),
            'new_arrivals': sum(1 for p in products if p.is_new_arrival),
        }

    # ------------------------------------------------------------------
    # CSV helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _product_row(product_id: str, product: dict, created_at: str, updated_at: str) -> dict:
        return {
            'id': product_id,
            'name': (product.get('name') or '').strip(),
            'description': product.get('description') or '',
            'image_url': product.get('image_url') or '',
            'is_new_arrival': 'true' if product.get('is_new_arrival') else 'false',
            'created_at': created_at,
            'updated_at': updated_at,
        }

    @staticmethod
    def _variant_row(product_id: str, variant: dict) -> dict:
        bulk_raw = variant.get('bulk_price')
        has_bulk = bulk_raw not in (None, '')
        return {
            'id': variant.get('id') or str(uuid4()),
            'product_id': product_id,
            'size_ml': str(_to_int(variant.get('size_ml'))),
            'regular_price': str(parse_decimal(variant.get('regular_price'))),
            'bulk_price': str(parse_decimal(bulk_raw)) if has_bulk else '',
            'bulk_min_quantity': str(_to_int(variant.get('bulk_min_quantity'), 1)) if has_bulk else '',
            'stock_quantity': str(_to_int(variant.get('stock_quantity'))),
        }

    @staticmethod
    def _load_rows(path: Path, columns: list[str]) -> list[dict]:
        if not path.exists():
            return []
        with open(path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            return [
                {col: (row.get(col) or '') for col in columns}
                for row in reader if row.get('id')
            ]

    @staticmethod
    def _write_rows(path: Path, columns: list[str], rows: list[dict]):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=columns)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
