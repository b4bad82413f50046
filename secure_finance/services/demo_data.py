"""
Demo Data Service

Fills a fresh database with the shared colour palette and, optionally,
a handful of demo accounts to try the API with.
"""
from sqlalchemy.orm import Session
from typing import List, Tuple
import bcrypt
from faker import Faker

from secure_finance.db.core import ColourDB, UserDB
from secure_finance.logging_config import get_logger

logger = get_logger(__name__)

PALETTE = [
    ("red", "FF0000"),
    ("orange", "FF7F00"),
    ("yellow", "FFFF00"),
    ("green-yellow", "7FFF00"),
    ("green", "00FF00"),
    ("mint green", "00FF7F"),
    ("turquoise", "00FFFF"),
    ("light blue", "007FFF"),
    ("blue", "0000FF"),
    ("violet", "7F00FF"),
    ("pink", "FF00FF"),
    ("magenta", "FF007F"),
]


def seed_colours(db: Session) -> int:
    """Insert the palette unless colours are already present"""
    if db.query(ColourDB).count() > 0:
        return 0

    for name, code in PALETTE:
        db.add(ColourDB(name=name, code=bytes.fromhex(code)))
    db.commit()
    logger.info("Seeded %d colours", len(PALETTE))
    return len(PALETTE)


def demo_users(count: int, fake: Faker) -> List[Tuple[str, str, UserDB]]:
    """
    Build demo accounts. The stored password is a bcrypt hash, which the
    server treats as any other opaque value; clients log in with its
    Base64 form.
    """
    users = []
    for i in range(count):
        first_name = fake.first_name()
        last_name = fake.last_name()
        username = f"{first_name.lower()}{i + 1}"
        plain_password = fake.password(length=12)
        hashed = bcrypt.hashpw(plain_password.encode('utf-8'), bcrypt.gensalt())
        users.append((
            username,
            plain_password,
            UserDB(
                username=username,
                password=hashed,
                email=f"{username}@example.com",
                first_name=first_name,
                last_name=last_name,
            ),
        ))
    return users


def seed_database(db: Session, with_demo_users: bool = False, user_count: int = 3,
                  seed: int = None) -> List[Tuple[str, str, UserDB]]:
    """Seed colours and optional demo users. Returns (username, plain password, row) for each user created."""
    seed_colours(db)

    if not with_demo_users:
        return []
    if db.query(UserDB).count() > 0:
        logger.info("Users already present, skipping demo users")
        return []

    fake = Faker()
    if seed is not None:
        Faker.seed(seed)

    created = demo_users(user_count, fake)
    for _, _, db_user in created:
        db.add(db_user)
    db.commit()
    logger.info("Seeded %d demo users", len(created))
    return created
