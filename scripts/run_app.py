#!/usr/bin/env python
"""
Run the Streamlit storefront.

Creates any missing data files first, so a fresh checkout opens on an
empty but working store.

Usage:
    python scripts/run_app.py [--port 8501]
"""
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from storefront.data.seed_store import seed_store


def main():
    ui_path = project_root / 'src' / 'storefront' / 'ui' / 'app_streamlit.py'
    if not ui_path.exists():
        print(f"ERROR: storefront UI not found at {ui_path}")
        sys.exit(1)

    report = seed_store(sample=False, verbose=False)
    if report["status"] != "success":
        print(f"ERROR: could not prepare store data: {'; '.join(report['errors'])}")
        sys.exit(1)

    port = sys.argv[sys.argv.index('--port') + 1] if '--port' in sys.argv[1:-1] else '8501'
    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), '--server.port', port]
    print(f"Starting storefront on port {port}")

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nStorefront stopped.")


if __name__ == "__main__":
    main()
