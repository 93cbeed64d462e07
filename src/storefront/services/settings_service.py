"""
Settings Service - key/value store settings backed by settings.csv.
"""
import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..engine.models import StoreSettings

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS = {
    StoreSettings.DELIVERY_COST: "0",
    StoreSettings.BULK_DISCOUNT_ENABLED: "false",
}


class SettingsService:
    """Reads and upserts flat key -> string store settings."""

    CSV_COLUMNS = ['key', 'value', 'updated_at']

    def __init__(self, settings_csv_path: Path):
        self.settings_csv_path = Path(settings_csv_path)

    def _load_rows(self) -> list[dict]:
        if not self.settings_csv_path.exists():
            return []
        with open(self.settings_csv_path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            return [row for row in reader if row.get('key')]

    def get_all(self) -> dict[str, str]:
        """All settings as a plain dict."""
        return {row['key']: row.get('value') or '' for row in self._load_rows()}

    def get_store_settings(self) -> StoreSettings:
        return StoreSettings.from_mapping(self.get_all())

    def update(self, values: dict) -> dict[str, str]:
        """Upsert each key, stamping updated_at. Returns the full mapping."""
        rows = self._load_rows()
        by_key = {row['key']: row for row in rows}
        timestamp = datetime.now(timezone.utc).isoformat()

        for key, value in (values or {}).items():
            key = str(key).strip()
            if not key:
                raise ValueError("Setting key is required")
            row = {'key': key, 'value': '' if value is None else str(value), 'updated_at': timestamp}
            if key in by_key:
                by_key[key].update(row)
            else:
                by_key[key] = row
                rows.append(row)

        self._write_rows(rows)
        logger.info("Updated settings: %s", ", ".join(sorted(values or {})))
        return self.get_all()

    def ensure_defaults(self) -> list[str]:
        """Write any missing default keys. Returns the keys that were added."""
        current = self.get_all()
        missing = {k: v for k, v in DEFAULT_SETTINGS.items() if k not in current}
        if missing or not self.settings_csv_path.exists():
            self.update(missing)
        return sorted(missing)

    def _write_rows(self, rows: list[dict]):
        self.settings_csv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS, extrasaction='ignore')
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
