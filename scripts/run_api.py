import subprocess
import sys
import os
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)

    host = env.get("API_HOST", "0.0.0.0")
    port = env.get("API_PORT", "8000")
    if not env.get("STRIPE_SECRET_KEY"):
        print("WARNING: STRIPE_SECRET_KEY is not set, checkout requests will fail.")

    cmd = [sys.executable, "-m", "uvicorn", "storefront.api.main:app", "--host", host, "--port", port]
    if "--no-reload" not in sys.argv[1:]:
        cmd.append("--reload")

    print(f"Starting Storefront API on {host}:{port}...")
    try:
        subprocess.run(cmd, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
