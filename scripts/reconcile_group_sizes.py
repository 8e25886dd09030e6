import asyncio
import os
import sys
import uuid

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core.db import database_from_settings
from app.core.logging import setup_logging
from app.modules.assets.aggregator import GroupSizeAggregator

async def main(user_id: uuid.UUID | None = None):
    """
    Recompute total_size for every asset group (or one user's groups).
    Safe to run at any time; each group is rebuilt from its current members.
    """
    db = database_from_settings()
    await db.connect()
    try:
        async with db.session() as session:
            totals = await GroupSizeAggregator(session).reconcile(user_id)
        print(f"Reconciled {len(totals)} asset groups")
    finally:
        await db.close()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(main(uuid.UUID(sys.argv[1]) if len(sys.argv) > 1 else None))
