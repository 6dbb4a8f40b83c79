import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from app.core.config import settings
from app.db.database import Database


async def main() -> None:
    database = Database(settings)
    try:
        await database.create_all()
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
