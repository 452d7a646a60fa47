"""
Railway startup script.

Handles:
    1. Database initialisation (creates tables, seeds admin role grants)
    2. Optional demo content
    3. Starts the FastAPI server (uvicorn)

Usage:
    python railway_start.py            # init + web
    python railway_start.py --seed     # init + demo data + web
    python railway_start.py --init     # init only
"""

import argparse
import asyncio
import os


async def prepare(seed: bool = False) -> dict:
    """Create tables, grant admin roles and optionally load demo data."""
    from backend import database
    from backend.auth import SYSTEM, seed_role_grants
    from backend.config import ADMIN_EMAILS
    from backend.services.dashboard import seed_demo_data

    await database.init_db()
    summary = {}
    async with database.async_session() as session:
        summary["role_grants"] = await seed_role_grants(session, ADMIN_EMAILS)
        if seed:
            summary["demo"] = await seed_demo_data(session, SYSTEM)
    # pooled connections belong to this loop, uvicorn runs its own
    await database.engine.dispose()
    return summary


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--seed", action="store_true", help="Load demo categories, offers, articles, rates")
    parser.add_argument("--init", action="store_true", help="Initialise the database and exit")
    args = parser.parse_args()

    port = int(os.environ.get("PORT", "8000"))

    print("=" * 60)
    print("  M-etod Hub -- Railway Startup")
    print("=" * 60)

    print("\n[1/2] Database initialization...")
    summary = asyncio.run(prepare(seed=args.seed))
    print(f"  Done: {summary}")

    if args.init:
        return

    print(f"\n[2/2] Starting FastAPI on port {port}...")
    import uvicorn
    uvicorn.run("backend.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
