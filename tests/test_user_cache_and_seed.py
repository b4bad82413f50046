import bcrypt

from secure_finance.crud import crud_user
from secure_finance.db.core import ColourDB, UserDB
from secure_finance.services.demo_data import PALETTE, seed_colours, seed_database
from secure_finance.services.user_cache import UserIdCache


def test_cache_put_get_invalidate() -> None:
    cache = UserIdCache()
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") == 1
    assert len(cache) == 2

    cache.invalidate("a")
    cache.invalidate("missing")
    assert cache.get("a") is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_cache_entry_dropped_when_user_deleted(db_session, make_user) -> None:
    cache = UserIdCache()
    db_user, principal = make_user("a", b"p1")
    assert crud_user.get_user_id(db_session, "a", cache) == db_user.id

    crud_user.delete_db_user(db_session, principal, cache)

    assert cache.get("a") is None


def test_palette_is_seeded_once(db_session) -> None:
    # db_session already seeded the palette
    assert db_session.query(ColourDB).count() == len(PALETTE) == 12
    assert seed_colours(db_session) == 0

    red = db_session.query(ColourDB).order_by(ColourDB.id).first()
    assert red.name == "red"
    assert bytes(red.code) == b"\xff\x00\x00"


def test_demo_users_store_bcrypt_hash_as_password(db_session) -> None:
    created = seed_database(db_session, with_demo_users=True, user_count=2, seed=1234)

    assert len(created) == 2
    assert db_session.query(UserDB).count() == 2
    for _, plain_password, db_user in created:
        assert bcrypt.checkpw(plain_password.encode("utf-8"), bytes(db_user.password))

    assert seed_database(db_session, with_demo_users=True) == []
