import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json
from typing import Any, Dict

from dotenv import load_dotenv

from cowork_booking.network.client import ApiClient
from cowork_booking.session import SessionContext

load_dotenv()

# Raw collections behind the reconciliation and booking screens
ENDPOINTS: Dict[str, str] = {
    "paiements": "/api/paiements",
    "reservations": "/api/reservations",
    "abonnements": "/api/abonnements",
    "evenements": "/api/admin/events",
    "factures": "/api/factures",
    "indisponibilites": "/api/indisponibilites",
    "espaces": "/api/espaces",
}


def save_fixture(data: Any, filename: str, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filename
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Saved {filename} ({len(data) if isinstance(data, list) else 'dict'})")


def fetch_all_fixtures(client: ApiClient, out_dir: Path) -> None:
    for name, path in ENDPOINTS.items():
        save_fixture(client.get(path), f"cowork_{name}.json", out_dir)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dump backend collections as JSON test fixtures.")
    parser.add_argument("--out", default="tests/fixtures", help="Output directory")
    args = parser.parse_args()

    session = SessionContext()
    session.init()
    if not session.is_logged_in():
        raise SystemExit("No persisted session; sign in first.")

    fetch_all_fixtures(ApiClient(session), Path(args.out))
