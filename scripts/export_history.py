"""
scripts/export_history.py
────────────────────────────────────────────────────────────────────────
Dump the local meal archive to JSON, optionally purging it afterwards:

    python -m scripts.export_history --out metabolic_archive.json
    python -m scripts.export_history --clear
"""
from __future__ import annotations

from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from config import settings
from core.history import EXPORT_FILENAME
from core.state import AppState
from services.db import BlobStore


def _ask(message: str) -> bool:
    return input(f"{message} [y/N] ").strip().lower() in ("y", "yes")


def main() -> None:
    ap = ArgumentParser(description=__doc__)
    ap.add_argument("--out", default=EXPORT_FILENAME)
    ap.add_argument("--clear", action="store_true")
    ap.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    args = ap.parse_args()

    state = AppState(BlobStore.from_url(settings.blob_store_url))
    path = state.history.export_to(args.out)
    print(f"✓ exported {len(state.history)} entries to {path}")

    if args.clear:
        confirm = (lambda _: True) if args.yes else _ask
        if state.clear_history(confirm):
            print("✓ archive purged")
        else:
            print("· archive kept")


if __name__ == "__main__":
    main()
