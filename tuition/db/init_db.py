"""
Create all tables for the tuition backend.

Run once against a fresh database:
  DATABASE_URL=postgresql+asyncpg://... python -m tuition.db.init_db
"""
import asyncio

import tuition.core.models  # noqa: F401  (registers tables on Base.metadata)
from tuition.db.session import Base, engine


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print(f"Created/verified {len(Base.metadata.tables)} tables.")


async def main() -> None:
    try:
        await init_db()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
