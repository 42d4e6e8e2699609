# chatterlite/infrastructure/test_data.py
import logging

from chatterlite.domain.entities import User, new_id
from chatterlite.infrastructure.store import StoreProvider

DEMO_USERS = [
    ("john@example.com", "John Smith"),
    ("sarah@example.com", "Sarah Johnson"),
    ("mike@example.com", "Mike Wilson"),
    ("emma@example.com", "Emma Davis"),
    ("test@example.com", "Test User"),
    ("alice@example.com", "Alice Cooper"),
    ("bob@example.com", "Bob Johnson"),
]


async def init_test_data(provider: StoreProvider, logger: logging.Logger) -> None:
    """Seed demo profiles for development; existing emails are skipped."""
    created = []
    async with provider.session() as store:
        for email, full_name in DEMO_USERS:
            if await store.users.get_by_email(email):
                continue
            await store.users.create_user(User(id=new_id(), email=email, full_name=full_name))
            created.append(full_name)
        await store.commit()

    if created:
        logger.info(f"Created {len(created)} demo users: {created}")
    else:
        logger.info("Demo users already exist, skipping creation")
