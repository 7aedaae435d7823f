"""
Create the schema and seed a minimal working dataset.

Creates (when missing) an admin user, one service center and one category,
then prints a bearer token for the admin so the API can be exercised at once.

Usage:
    python -m scripts.seed_service_center --email admin@example.com
"""
import argparse
import asyncio
import os
import sys

# Add parent directory to path to import service_center modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from service_center.auth import rbac_contract
from service_center.auth.rbac_contract import Role
from service_center.crud.records import SqlStorage
from service_center.database import get_engine, get_sessionmaker
from service_center.models import Base
from service_center.security.tokens import create_access_token

DEFAULT_CENTER = {
    "name": "Main Service Center",
    "address": "1 Workshop Street",
    "phone": "+1-555-0100",
}

DEFAULT_CATEGORY = {
    "name": "Home Appliances",
    "description": "Washers, dryers, refrigerators and ovens",
}


async def create_schema() -> None:
    async with get_engine().begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def seed_service_center(email: str, full_name: str) -> str:
    """Seed default rows and return an access token for the admin."""
    await create_schema()

    async with get_sessionmaker()() as session:
        storage = SqlStorage(session)

        print("Seeding service center data...")
        print(f"  Roles: {', '.join(sorted(rbac_contract.ALL_ROLES))}")
        print(f"  Resources: {len(rbac_contract.ALL_RESOURCES)}")

        centers = await storage.centers.list(name=DEFAULT_CENTER["name"], limit=1)
        if centers:
            center = centers[0]
            print(f"  Service center '{center.name}' already exists, skipping...")
        else:
            center = await storage.centers.create(**DEFAULT_CENTER)
            print(f"  Created service center '{center.name}'")

        if await storage.categories.list(name=DEFAULT_CATEGORY["name"], limit=1):
            print(f"  Category '{DEFAULT_CATEGORY['name']}' already exists, skipping...")
        else:
            await storage.categories.create(**DEFAULT_CATEGORY)
            print(f"  Created category '{DEFAULT_CATEGORY['name']}'")

        admins = await storage.users.list(email=email, limit=1)
        if admins:
            admin = admins[0]
            print(f"  User '{email}' already exists, skipping...")
        else:
            admin = await storage.users.create(
                email=email,
                full_name=full_name,
                role=Role.ADMIN.value,
                status="active",
                center_id=center.id,
            )
            print(f"  Created admin '{email}'")

        await storage.commit()

    return create_access_token(str(admin.id))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args()

    token = asyncio.run(seed_service_center(args.email, args.full_name))
    print("\nAdmin access token:")
    print(token)


if __name__ == "__main__":
    main()
