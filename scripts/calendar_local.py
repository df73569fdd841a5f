#!/usr/bin/env python3
"""
Interactive calendar harness (no UI).

Usage:
  python3 scripts/calendar_local.py

What it does:
- Builds the same BookingStore the app uses (hosted API when USE_API=true, otherwise the on-device file)
- Keeps polling in the background while you type
- Prints the day grid and lets you book, resize, rename and remove bookings
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hourbook.application.utils.time_grid import date_key, hour_from_time_key, parse_date_key, time_key
from hourbook.core.config import settings
from hourbook.domain.entities.slot_status import Blocked, Booked
from hourbook.wiring.dependencies import get_container


def _print_help() -> None:
    print("Commands:")
    print("  /day [YYYY-MM-DD]          -> show a day (default: current day)")
    print("  /book HH [user] [hours]    -> book starting at HH:00")
    print("  /resize HH hours           -> change the duration of the booking at HH:00")
    print("  /rename HH user            -> hand the booking at HH:00 to someone else")
    print("  /remove HH                 -> delete the booking at HH:00")
    print("  /refresh                   -> re-fetch everything now")
    print("  /users                     -> list configured users")
    print("  /quit")


def _print_day(store, dk: str) -> None:
    print(f"\n--- {dk} ---")
    for slot, status in store.day_statuses(dk):
        if isinstance(status, Booked):
            mark = "*" if status.booking.user == settings.CURRENT_USER else " "
            line = f"{status.booking.user} ({status.booking.duration}h){mark}"
        elif isinstance(status, Blocked):
            line = f"  | {status.booking.user}"
        else:
            line = "."
        print(f"{slot.time_key}  {line}")
    if store.error:
        print(f"(last error: {store.error})")


def _hour(arg: str) -> int:
    return hour_from_time_key(arg) if ":" in arg else int(arg)


async def main() -> None:
    container = get_container()
    store = container["store"]
    config = await container["config_loader"].load()
    current_day = date_key(date.today())

    print(f"\n{config.title}")
    print("-" * 60)
    _print_help()
    print("-" * 60)

    async with store:
        _print_day(store, current_day)
        while True:
            try:
                text = (await asyncio.to_thread(input, "\n> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break

            if not text:
                continue
            cmd, *args = text.split()
            cmd = cmd.lower()

            try:
                if cmd in ("/quit", "/exit"):
                    print("Bye!")
                    break
                if cmd == "/help":
                    _print_help()
                elif cmd == "/day":
                    if args:
                        parse_date_key(args[0])
                        current_day = args[0]
                    _print_day(store, current_day)
                elif cmd == "/book" and args:
                    hour = _hour(args[0])
                    user = args[1] if len(args) > 1 else settings.CURRENT_USER
                    hours = int(args[2]) if len(args) > 2 else 1
                    ok = await store.book(current_day, hour, user, hours)
                    print("booked" if ok else "not booked")
                    _print_day(store, current_day)
                elif cmd == "/resize" and len(args) == 2:
                    ok = await store.resize(current_day, time_key(_hour(args[0])), int(args[1]))
                    print("resized" if ok else "not resized")
                    _print_day(store, current_day)
                elif cmd == "/rename" and len(args) == 2:
                    ok = await store.update(current_day, time_key(_hour(args[0])), user=args[1])
                    print("renamed" if ok else "not renamed")
                    _print_day(store, current_day)
                elif cmd == "/remove" and args:
                    ok = await store.remove(current_day, time_key(_hour(args[0])))
                    print("removed" if ok else "not removed")
                    _print_day(store, current_day)
                elif cmd == "/refresh":
                    await store.refresh()
                    _print_day(store, current_day)
                elif cmd == "/users":
                    for u in config.users:
                        print(f"  [{u.key}] {u.name}")
                else:
                    print("Unknown command, try /help")
            except ValueError as e:
                print(f"ERROR: {e}")

    await container["repository"].aclose()


if __name__ == "__main__":
    asyncio.run(main())
