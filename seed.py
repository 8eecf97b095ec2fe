import asyncio
import logging

from sqlmodel import SQLModel

from config import ApplicationConfig
from crm_service.adapter.seed import seed_system_roles
from crm_service.depends import AsyncSessionLocal, engine


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await seed_system_roles(session)

    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)
    asyncio.run(main())
