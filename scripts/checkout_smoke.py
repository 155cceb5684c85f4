#!/usr/bin/env python3
"""
Smoke test of a running deploy: health checks, then one real Checkout Session.

Usage:
    python scripts/checkout_smoke.py                        # http://localhost:8000
    python scripts/checkout_smoke.py https://staging.example.com owner@acme.com

Reads STRIPE_PRICE_GOLD (or SMOKE_PRICE_ID) from .env for the price to buy.
"""

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

import httpx

from lib.checkout_client import CheckoutError, CheckoutInitiator, CheckoutPreconditionError


def check(client: httpx.Client, path: str) -> dict:
    response = client.get(path)
    body = response.json()
    print(f"  GET {path} -> {response.status_code}")
    for key, value in body.items():
        print(f"      {key}: {value}")
    return body


def main():
    base_url = sys.argv[1].rstrip("/") if len(sys.argv) > 1 else "http://localhost:8000"
    email = sys.argv[2] if len(sys.argv) > 2 else "smoke-test@restorationexpertise.com"
    price_id = os.getenv("SMOKE_PRICE_ID") or os.getenv("STRIPE_PRICE_GOLD")

    print("=" * 60)
    print(f"Smoke test against {base_url}")
    print("=" * 60)

    with httpx.Client(base_url=f"{base_url}/api/v1", timeout=15.0) as client:
        print("\n[1] Health")
        check(client, "/health")

        print("\n[2] Configuration")
        env = check(client, "/env-check")
        checkout = check(client, "/checkout-health")

        if not env.get("ok"):
            print(f"\nWARNING: missing configuration: {env.get('missing')}")
        if not checkout.get("has_secret"):
            print("\nStripe is not configured on this deploy, stopping.")
            sys.exit(1)

        print("\n[3] Checkout Session")
        initiator = CheckoutInitiator(
            f"{base_url}/api/v1/create-checkout-session",
            price_id,
            navigate=lambda url: print(f"  Open to pay: {url}"),
            http_client=client,
        )
        try:
            initiator.start("smoke-assessment", "smoke-profile", email)
        except CheckoutPreconditionError as e:
            print(f"  Not started: {e.message}")
            sys.exit(1)
        except CheckoutError as e:
            print(f"  FAILED: {e.message}")
            sys.exit(1)

    print("\nDone.")


if __name__ == "__main__":
    main()
