"""Notify visitors and hosts of reservations starting today.

Meant to run once a day from a scheduler (cron, systemd timer, k8s CronJob).
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date

from coworking.db.session import SessionLocal, engine
from coworking.services import reservations as reservations_service


async def main(day: date | None) -> int:
    async with SessionLocal() as session:
        sent = await reservations_service.notify_due_reservations(session, day=day)
    await engine.dispose()
    return sent


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--day", type=date.fromisoformat, default=None, help="ISO date, defaults to today (UTC)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    count = asyncio.run(main(args.day))
    print(f"Sent starting notifications for {count} reservations.")
