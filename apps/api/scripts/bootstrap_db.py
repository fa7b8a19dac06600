"""Create the snapshot schema and seed demo apartment snapshots for development."""
from __future__ import annotations

import asyncio

from rentboard.data.apartments import DEMO_APARTMENTS
from rentboard.db.session import SessionLocal, create_schema
from rentboard.repositories import snapshots as snapshots_repo
from rentboard.schemas.apartments import Apartment


async def seed_snapshots() -> int:
	"""Insert or refresh one apartment snapshot per demo apartment."""

	async with SessionLocal() as session:
		async with session.begin():
			for data in DEMO_APARTMENTS:
				record = Apartment.model_validate(data).model_dump(mode="json")
				key = snapshots_repo.snapshot_key("apartment", record["apartmentId"])
				await snapshots_repo.save_snapshot(session, key, "apartment", {"record": record})
	return len(DEMO_APARTMENTS)


async def main() -> None:
	await create_schema()
	seeded = await seed_snapshots()
	print(f"Snapshot schema ensured and {seeded} demo apartments seeded.")


if __name__ == "__main__":
	asyncio.run(main())
