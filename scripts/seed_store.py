#!/usr/bin/env python
"""
Seed pipeline - creates store data files, default settings and sample products.

Usage:
    python scripts/seed_store.py [--no-sample]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from storefront.data.seed_store import seed_store


def main():
    print("=" * 60)
    print("STOREFRONT SEED")
    print("=" * 60)
    print()

    sample = '--no-sample' not in sys.argv[1:]
    report = seed_store(sample=sample, verbose=True)

    if report["status"] != "success":
        print("\n❌ SEED FAILED")
        for error in report["errors"]:
            print(f"  {error}")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ SEED COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Files created: {len(report['created_files'])}")
    print(f"  Default settings added: {', '.join(report['default_settings_added']) or 'none'}")
    print(f"  Sample products: {report['sample_products_added']}")
    print(f"  New arrivals marked: {report['new_arrivals_marked']}")


if __name__ == "__main__":
    main()
