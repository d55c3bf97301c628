#!/usr/bin/env python3
"""Print one day's dialogues for manual review, or upload a hand-written summary.

Usage examples:
    # Print today's dialogues (UTC) formatted for review
    uv run python scripts/export_dialogues.py

    # A specific day
    uv run python scripts/export_dialogues.py 2024-02-01

    # Store a summary written elsewhere as that day's report
    uv run python scripts/export_dialogues.py 2024-02-01 --save notes/2024-02-01.md
"""

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

import httpx

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dialog_digest.config import settings


def format_dialogues(dialogues: list[dict]) -> str:
    """Render dialogues as numbered plain-text blocks."""
    if not dialogues:
        return "No dialogues recorded."

    users = sum(1 for d in dialogues if d.get("role") == "user")
    lines = [
        f"Total messages: {len(dialogues)}",
        f"User messages: {users}",
        f"Assistant messages: {len(dialogues) - users}",
        "",
        "=== Dialogues ===",
        "",
    ]
    for i, d in enumerate(dialogues, 1):
        label = "User" if d.get("role") == "user" else "Assistant"
        lines.append(f"[{label} {i}]")
        lines.append(d.get("content", ""))
        lines.append("")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "date",
        nargs="?",
        default=datetime.now(UTC).date().isoformat(),
        help="Day to export (YYYY-MM-DD, default today UTC)",
    )
    parser.add_argument("--save", type=Path, help="Markdown file to store as the summary")
    parser.add_argument(
        "--base-url",
        default=f"http://{settings.http_host}:{settings.http_port}/api",
        help="API base URL",
    )
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=30) as client:
        try:
            if args.save:
                summary = args.save.read_text(encoding="utf-8")
                resp = client.post(f"/analyze-with-cursor/{args.date}", json={"summary": summary})
                resp.raise_for_status()
                print(f"Stored summary for {args.date} ({len(summary)} chars)")
                return

            resp = client.get(f"/dialogues/{args.date}")
            resp.raise_for_status()
        except (httpx.HTTPError, OSError) as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            sys.exit(1)

    print(format_dialogues(resp.json().get("data") or []))


if __name__ == "__main__":
    main()
