#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path

import requests


def main() -> None:
    parser = argparse.ArgumentParser(description="Download a Horder backup snapshot over HTTP")
    parser.add_argument("--base-url", default="http://localhost:5001")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", required=True)
    parser.add_argument("--out", default=None, help="default: horder-backup-<today>.json")
    args = parser.parse_args()

    login = requests.post(
        f"{args.base_url}/login",
        json={"username": args.username, "password": args.password},
        timeout=30,
    )
    login.raise_for_status()
    token = login.json()["token"]

    resp = requests.get(f"{args.base_url}/backup", headers={"Authorization": f"Bearer {token}"}, timeout=60)
    resp.raise_for_status()

    out = Path(args.out or f"horder-backup-{date.today().isoformat()}.json")
    out.write_text(json.dumps(resp.json(), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"backup written to {out}")


if __name__ == "__main__":
    main()
