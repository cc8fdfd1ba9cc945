#!/usr/bin/env python3
"""Create sample actions in SafetyCulture and write a CSV for bulk-update testing.

Creates up to 20 actions with varied titles (random priority), waiting between
requests to stay under the upstream rate limit, then writes a CSV with the
new action ids plus a target status and notes column:

    Action_ID,Title,Current_Status,New_Status,Notes

The API key is read from SAFETYCULTURE_API_KEY (a .env file is honoured).
"""
from __future__ import annotations

import argparse
import os
import random
import sys
import time
from datetime import date
from pathlib import Path
from typing import Any

import httpx
import pandas as pd
from dotenv import load_dotenv

API_BASE = "https://api.safetyculture.io"

SAMPLE_ACTIONS: list[tuple[str, str]] = [
    ("Inspect fire extinguisher in Building A", "Monthly fire safety inspection required"),
    ("Replace broken safety railing on Level 2", "Railing damaged during recent incident"),
    ("Update emergency evacuation signs", "Signs need to comply with new regulations"),
    ("Service HVAC system in warehouse", "Annual maintenance due"),
    ("Repair leaking pipe in restroom", "Water leak reported by staff"),
    ("Install additional lighting in parking lot", "Safety improvement request"),
    ("Clean chemical storage area", "Weekly cleaning schedule"),
    ("Test emergency alarm system", "Quarterly testing required"),
    ("Replace worn floor mats at entrance", "Slip hazard identified"),
    ("Calibrate temperature sensors", "Monthly calibration check"),
    ("Update first aid kit contents", "Expired items need replacement"),
    ("Fix broken window in office 201", "Window cracked and needs replacement"),
    ("Inspect forklift brakes", "Pre-operation safety check"),
    ("Clear blocked emergency exit", "Items stored blocking exit path"),
    ("Review and update safety procedures", "Annual procedure review"),
    ("Test backup generator", "Monthly operational test"),
    ("Repair damaged safety barrier", "Barrier hit by vehicle"),
    ("Install eye wash station", "Required for chemical handling area"),
    ("Schedule safety training session", "New employee onboarding"),
    ("Audit PPE inventory levels", "Ensure adequate stock of safety equipment"),
]

PRIORITY_IDS: dict[str, str] = {
    "None": "58941717-817f-4c7c-a6f6-5cd05e2bbfde",
    "Low": "16ba4717-adc9-4d48-bf7c-044cfe0d2727",
    "Medium": "ce87c58a-eeb2-4fde-9dc4-c6e85f1f4055",
    "High": "02eb40c1-4f46-40c5-be16-d32941c96ec9",
}


def create_action(
    client: httpx.Client,
    api_key: str,
    title: str,
    description: str,
    *,
    rng: random.Random,
    base_url: str = API_BASE,
) -> str | None:
    """Create one action and return its id (None on failure)."""
    body = {
        "title": title,
        "description": description,
        "priority_id": rng.choice(list(PRIORITY_IDS.values())),
    }
    try:
        response = client.post(
            f"{base_url}/tasks/v1/actions",
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json=body,
        )
    except httpx.HTTPError as e:
        print(f"Error creating action '{title}': {e}", file=sys.stderr)
        return None
    if not response.is_success:
        print(f"Error creating action '{title}': {response.status_code} - {response.text}", file=sys.stderr)
        return None
    try:
        data = response.json()
    except ValueError:
        print(f"Error creating action '{title}': response is not JSON - {response.text}", file=sys.stderr)
        return None
    return data.get("action_id") if isinstance(data, dict) else None


def build_row(action_id: str, title: str, rng: random.Random) -> dict[str, Any]:
    return {
        "Action_ID": action_id,
        "Title": title,
        "Current_Status": "To Do",
        "New_Status": "Complete" if rng.random() > 0.5 else "In Progress",
        "Notes": f"Updated via bulk tool - {date.today().isoformat()}",
    }


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Create sample SafetyCulture actions and write a bulk-update CSV",
    )
    parser.add_argument("output", type=Path, nargs="?", default=Path("random_actions.csv"))
    parser.add_argument("--count", type=int, default=len(SAMPLE_ACTIONS),
                        help=f"Number of actions to create (max {len(SAMPLE_ACTIONS)})")
    parser.add_argument("--delay", type=float, default=3.0,
                        help="Seconds to wait between requests (default: 3)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for priorities/statuses")
    parser.add_argument("--dry-run", action="store_true", help="Show the plan without calling the API")
    args = parser.parse_args()

    if not 0 < args.count <= len(SAMPLE_ACTIONS):
        print(f"Error: --count must be between 1 and {len(SAMPLE_ACTIONS)}", file=sys.stderr)
        return 1

    load_dotenv()
    api_key = os.getenv("SAFETYCULTURE_API_KEY")
    if not api_key:
        print("Error: SAFETYCULTURE_API_KEY not found in environment or .env file", file=sys.stderr)
        return 1

    print(f"Creating {args.count} sample actions (delay {args.delay}s between requests)")
    if args.dry_run:
        print("\n[DRY RUN] Would create actions but not calling the API.")
        return 0

    rng = random.Random(args.seed)
    rows: list[dict[str, Any]] = []
    with httpx.Client(timeout=30.0) as client:
        for i, (title, description) in enumerate(SAMPLE_ACTIONS[: args.count]):
            action_id = create_action(client, api_key, title, description, rng=rng)
            if action_id:
                print(f"Created action {i + 1}/{args.count}: {title}  id={action_id}")
                rows.append(build_row(action_id, title, rng))
            # Rate limiting between requests
            if i < args.count - 1:
                time.sleep(args.delay)

    print(f"\nSuccessfully created {len(rows)} actions")
    if not rows:
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(args.output, index=False)
    print(f"CSV file saved to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
