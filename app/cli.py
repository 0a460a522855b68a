"""Command-line helpers that talk to a running workout tracker API.

    python -m app.cli suggest "Focus on chest and triceps, low intensity."
    python -m app.cli list
    python -m app.cli populate workouts_data.json
    python -m app.cli init-db
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import httpx

from .settings import get_settings


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or data)
    return str(data)


def suggest(client: httpx.Client, instructions: str = "") -> str:
    resp = client.post("/suggest-workout", json={"additional_input": instructions})
    if resp.status_code >= 400:
        raise RuntimeError(f"HTTP error! Status: {resp.status_code}, Message: {_error_message(resp)}")
    return resp.text


def format_workout_listing(workouts: List[Dict[str, Any]]) -> str:
    if not workouts:
        return "No workouts found in the database."
    lines = [f"Found {len(workouts)} workouts.", "", "--- All Workout Details ---"]
    for w in workouts:
        lines.append("")
        lines.append(f"--- Workout ID: {w['id']} ({w['day']}) ---")
        lines.append(f"  Title: {w['title']}")
        if w.get("subtitle"):
            lines.append(f"  Subtitle: {w['subtitle']}")
        exercises = w.get("exercises") or []
        if not exercises:
            lines.append("  No exercises logged for this workout.")
            continue
        lines.append("  Exercises:")
        for i, ex in enumerate(exercises, start=1):
            lines.append(f"    {i}. Name: {ex['name']}")
            for key, label in (("target_muscles", "Target Muscles"), ("machine", "Machine"), ("attachments", "Attachments")):
                if ex.get(key):
                    lines.append(f"       {label}: {ex[key]}")
            sets = ex.get("sets") or []
            if not sets:
                lines.append("       No sets logged for this exercise.")
                continue
            lines.append("       Sets:")
            for j, s in enumerate(sets, start=1):
                lines.append(f"         Set {j}: {s['reps']} reps @ {s['weight']} {s['unit']}")
    lines.append("")
    lines.append("--- End of All Workout Details ---")
    return "\n".join(lines)


def list_workouts(client: httpx.Client) -> str:
    resp = client.get("/workouts")
    if resp.status_code >= 400:
        raise RuntimeError(f"HTTP error fetching workouts list! Status: {resp.status_code}, Message: {_error_message(resp)}")
    return format_workout_listing(resp.json())


def populate(client: httpx.Client, path: str) -> Dict[str, int]:
    """POST every workout in a JSON array file; returns success/failure counts."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            workouts = json.load(f)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Could not read workouts from {path}: {e}") from e
    if not isinstance(workouts, list):
        raise RuntimeError(f"Expected a JSON array of workouts in {path}, got {type(workouts).__name__}")
    print(f"Read {len(workouts)} workouts from {path}")

    counts = {"added": 0, "failed": 0}
    for index, workout in enumerate(workouts):
        if not isinstance(workout, dict):
            print(f"Skipping entry {index}: expected a workout object, got {type(workout).__name__}")
            counts["failed"] += 1
            continue
        label = f"{workout.get('day')} - {workout.get('title')}"
        try:
            resp = client.post("/workouts", json=workout)
        except httpx.HTTPError as e:
            print(f"Error sending POST request for workout {label}: {e}")
            counts["failed"] += 1
            continue
        if resp.status_code == 201:
            print(f"Successfully added workout: {label} (id {resp.json().get('workoutId')})")
            counts["added"] += 1
        else:
            print(f"Failed to add workout: {label}. Status: {resp.status_code}. Error: {_error_message(resp)}")
            counts["failed"] += 1
    return counts


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Workout tracker command-line client")
    parser.add_argument("--url", default=None, help="API base URL (defaults to API_BASE_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_suggest = sub.add_parser("suggest", help="Ask the AI for today's workout")
    p_suggest.add_argument("instructions", nargs="?", default="", help="Extra instructions for the AI")
    sub.add_parser("list", help="Print every workout with its exercises and sets")
    p_populate = sub.add_parser("populate", help="Create workouts from a JSON array file")
    p_populate.add_argument("path")
    sub.add_parser("init-db", help="Create the database tables")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        from .db import init_db

        asyncio.run(init_db())
        print("Database tables created.")
        return 0

    base_url = args.url or get_settings().api_base_url
    timeout = get_settings().gemini_timeout_seconds + 10
    try:
        with httpx.Client(base_url=base_url, timeout=timeout) as client:
            if args.command == "suggest":
                print("Requesting workout suggestions from the AI...")
                print(suggest(client, args.instructions))
            elif args.command == "list":
                print(list_workouts(client))
            elif args.command == "populate":
                counts = populate(client, args.path)
                print(f"Database population completed: {counts['added']} added, {counts['failed']} failed.")
    except (RuntimeError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
