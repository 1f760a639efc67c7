"""Create one order through a running order server.

Handy for checking gateway credentials without opening a checkout.
"""

import argparse
import json

import httpx


def create_order(base_url: str, amount: float, currency: str) -> httpx.Response:
    """POST one order request and return the raw response."""

    with httpx.Client(timeout=10.0) as client:
        return client.post(f"{base_url}/create-order", json={"amount": amount, "currency": currency})


def main() -> None:
    """Parse CLI args, create one order, print the JSON response."""

    parser = argparse.ArgumentParser(description="Create one payment order.")
    parser.add_argument("--base-url", default="http://localhost:5000")
    parser.add_argument("--amount", type=float, required=True, help="Amount in rupees")
    parser.add_argument("--currency", default="INR")
    args = parser.parse_args()

    resp = create_order(args.base_url.rstrip("/"), args.amount, args.currency)
    print(f"status={resp.status_code}")
    try:
        print(json.dumps(resp.json(), indent=2))
    except ValueError:
        print(resp.text)
    if resp.status_code >= 400:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
