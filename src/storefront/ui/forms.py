"""
Conversions between catalog variants and the admin variant editor table.
"""
from typing import Optional

import pandas as pd

from ..engine.models import Product

EDITOR_COLUMNS = ['id', 'size_ml', 'regular_price', 'bulk_price', 'bulk_min_quantity', 'stock_quantity']


def variant_frame(product: Optional[Product] = None) -> pd.DataFrame:
    """Editor rows for a product's variants, or one blank row for a new product."""
    if product is None:
        return pd.DataFrame([{
            'id': None, 'size_ml': 50, 'regular_price': 0.0, 'bulk_price': None,
            'bulk_min_quantity': None, 'stock_quantity': 0,
        }], columns=EDITOR_COLUMNS)

    rows = [
        {
            'id': v.id,
            'size_ml': v.size_ml,
            'regular_price': float(v.regular_price),
            'bulk_price': float(v.bulk_price) if v.bulk_price is not None else None,
            'bulk_min_quantity': v.bulk_min_quantity if v.bulk_price is not None else None,
            'stock_quantity': v.stock_quantity,
        }
        for v in product.variants
    ]
    return pd.DataFrame(rows, columns=EDITOR_COLUMNS)


def variants_from_frame(df: pd.DataFrame) -> list[dict]:
    """Variant dicts for CatalogService; blank cells become None, ids are kept."""
    variants = []
    for row in df.to_dict(orient='records'):
        if all(pd.isna(value) for value in row.values()):
            continue
        variants.append({k: (None if pd.isna(v) else str(v)) for k, v in row.items()})
    return variants
