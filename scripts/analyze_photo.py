"""
scripts/analyze_photo.py
────────────────────────────────────────────────────────────────────────
Scan a meal photo through the running lab API and archive the result:

    python -m scripts.analyze_photo lunch.jpg
    python -m scripts.analyze_photo lunch.jpg --persona ATHLETE --lang ar
"""
from __future__ import annotations

from argparse import ArgumentParser
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from core.models.user import BioPersona
from scripts.helpers import build_session


def main() -> None:
    ap = ArgumentParser(description=__doc__)
    ap.add_argument("photo", type=Path)
    ap.add_argument("--persona", choices=[p.value for p in BioPersona])
    ap.add_argument("--lang")
    args = ap.parse_args()

    session = build_session()
    if args.persona:
        session.state.set_persona(args.persona)
    if args.lang:
        session.state.set_language(args.lang)
    if session.start():
        print("· cloud sync connected")

    try:
        result = session.analyze(args.photo.read_bytes())
    except ValueError as e:
        raise SystemExit(f"! {args.photo}: {e}")
    if result is None:
        raise SystemExit(f"! analysis failed: {session.scan.error_message}")

    print(f"✓ {result.total_calories:.0f} kcal · health score {result.health_score:.0f}/100")
    for ing in result.ingredients:
        print(f"  - {ing.name}: {ing.calories:.0f} kcal")
    print(f"  P {result.macros.protein:.0f}g · C {result.macros.carbs:.0f}g · F {result.macros.fat:.0f}g")
    print(result.summary)
    print(result.personalized_advice)
    print(f"· archive now holds {session.state.scans_count} scans")


if __name__ == "__main__":
    main()
