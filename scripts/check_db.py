import asyncio
import sys
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from sqlalchemy import select  # noqa: E402

from app.api.deps import AsyncSessionLocal  # noqa: E402
from app.infrastructure.db.tables import reservations  # noqa: E402


async def check_db(limit: int = 5):
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(
                reservations.c.id,
                reservations.c.status,
                reservations.c.supplier_status,
                reservations.c.supplier_order_id,
                reservations.c.session_id,
            )
            .order_by(reservations.c.created_at.desc())
            .limit(limit)
        )
        rows = result.fetchall()

    print("\n=== LATEST RESERVATIONS ===")
    print(f"{'ID':<34} | {'STATUS':<10} | {'SUPPLIER':<12} | {'ORDER':<40} | SESSION")
    print("-" * 120)
    for row in rows:
        print(
            f"{row[0]:<34} | {row[1]:<10} | {(row[2] or '-'):<12} | "
            f"{(row[3] or '-'):<40} | {row[4] or '-'}"
        )


if __name__ == "__main__":
    asyncio.run(check_db())
