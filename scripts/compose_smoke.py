#!/usr/bin/env python3
from __future__ import annotations

import os
import sys
import time

import httpx


def main() -> int:
    base_url = os.getenv("DOCQA_API_URL", "http://localhost:8001").rstrip("/")
    try:
        health = httpx.get(f"{base_url}/healthz", timeout=5)
        print("/healthz:", health.text)
        # Give the service a moment to finish boot
        time.sleep(0.5)
        categories = httpx.get(f"{base_url}/categories", timeout=5)
        print("/categories:", categories.text)
        health.raise_for_status()
        categories.raise_for_status()
    except httpx.HTTPError as exc:
        print(f"Smoke check failed: {exc}", file=sys.stderr)
        return 1
    print("Smoke check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
