"""
scripts/synthesize_plan.py
────────────────────────────────────────────────────────────────────────
Ask the lab for a one-day plan, optionally logging how the last plan felt:

    python -m scripts.synthesize_plan "Immunity Boost"
    python -m scripts.synthesize_plan "Neural Focus" --feedback better
"""
from __future__ import annotations

from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from core.models.user import FeedbackSignal
from core.requests import ErrorKind
from scripts.helpers import build_session


def main() -> None:
    ap = ArgumentParser(description=__doc__)
    ap.add_argument("goal")
    ap.add_argument("--diet", default="balanced")
    ap.add_argument("--feedback", choices=[s.value for s in FeedbackSignal])
    args = ap.parse_args()

    session = build_session()
    if args.feedback:
        session.state.select_goal(args.goal)
        session.submit_feedback(args.feedback)
        print(f"· logged '{args.feedback}' for {args.goal}")

    plan = session.synthesize(args.goal, diet=args.diet)
    if plan is None:
        if session.plan.error_kind is ErrorKind.auth:
            raise SystemExit("! the server's API key is missing or was rejected")
        raise SystemExit(f"! synthesis failed ({session.plan.error_message}), try again")

    for slot in ("breakfast", "lunch", "dinner", "snack"):
        meal = getattr(plan, slot)
        if meal is not None:
            print(f"{slot:<10} {meal.name} ({meal.calories})")
    print(f"total      {plan.total_calories}")
    print(plan.advice)


if __name__ == "__main__":
    main()
