# scripts/test/simulate_race.py
"""
Fire concurrent claims at one vehicle against a running backend.
Exactly one claim should come back 200; the rest 409 (or 404).

Usage: python scripts/test/simulate_race.py --vehicle 3 --accounts 111111:pass 222222:pass
"""

import argparse
import requests
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

BACKEND_URL = "http://localhost:8080/api/v1"


def login(code, password):
    resp = requests.post(f"{BACKEND_URL}/auth/login",
                         json={"registration_code": code, "password": password}, timeout=10)
    resp.raise_for_status()
    return resp.json()["token"]


def claim(token, vehicle_id, justification):
    resp = requests.post(f"{BACKEND_URL}/trips",
                         json={"vehicle_id": vehicle_id, "justification": justification},
                         headers={"Authorization": f"Bearer {token}"}, timeout=10)
    return resp.status_code, resp.json()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Race several accounts for the same vehicle")
    parser.add_argument("--vehicle", type=int, required=True)
    parser.add_argument("--accounts", nargs="+", required=True, help="code:password pairs")
    parser.add_argument("--justification", default="race simulation")
    parser.add_argument("--url", default=BACKEND_URL)
    args = parser.parse_args()
    BACKEND_URL = args.url.rstrip("/")

    tokens = [login(*pair.split(":", 1)) for pair in args.accounts]
    with ThreadPoolExecutor(max_workers=len(tokens)) as pool:
        results = list(pool.map(lambda t: claim(t, args.vehicle, args.justification), tokens))

    for code, body in results:
        print(f"{'✅' if code == 200 else '⛔'} HTTP {code}: {body}")
    summary = Counter(code for code, _ in results)
    print(f"\n📊 {dict(summary)}")
    if summary.get(200, 0) != 1:
        print("❌ Expected exactly one successful claim")
