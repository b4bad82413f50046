import os
from dotenv import load_dotenv
from typing import Optional
from sqlalchemy import create_engine, event, ForeignKey, Index, UniqueConstraint, Integer, Text, LargeBinary
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column


load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///secure_finance.db")


class NotFoundError(Exception):
    pass


class CredentialsError(Exception):
    """The acting principal no longer matches its stored user record."""
    pass


class ConflictError(ValueError):
    pass


class EncodingError(ValueError):
    pass


class Base(DeclarativeBase):
    pass


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("username", name="uq_user_username"),
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_users_username", "username"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Authentication
    username: Mapped[str] = mapped_column(Text, nullable=False)
    password: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    # Personal Information
    email: Mapped[Optional[str]] = mapped_column(Text)
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    categories = relationship("CategoryDB", back_populates="user", passive_deletes=True)
    subcategories = relationship("SubcategoryDB", back_populates="user", passive_deletes=True)
    labels = relationship("LabelDB", back_populates="user", passive_deletes=True)
    entries = relationship("EntryDB", back_populates="user", passive_deletes=True)


class ColourDB(Base):
    __tablename__ = "colours"

    __table_args__ = (
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


class CategoryDB(Base):
    __tablename__ = "categories"

    __table_args__ = (
        Index("idx_categories_user", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    description: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    colour_id: Mapped[int] = mapped_column(ForeignKey("colours.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = relationship("UserDB", back_populates="categories")
    subcategories = relationship("SubcategoryDB", back_populates="category", passive_deletes=True)


class SubcategoryDB(Base):
    __tablename__ = "subcategories"

    __table_args__ = (
        Index("idx_subcategories_user_category", "user_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    description: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    colour_id: Mapped[int] = mapped_column(ForeignKey("colours.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = relationship("UserDB", back_populates="subcategories")
    category = relationship("CategoryDB", back_populates="subcategories")
    entries = relationship("EntryDB", back_populates="subcategory", passive_deletes=True)


class LabelDB(Base):
    __tablename__ = "labels"

    __table_args__ = (
        Index("idx_labels_user", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    description: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    colour_id: Mapped[int] = mapped_column(ForeignKey("colours.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = relationship("UserDB", back_populates="labels")
    entry_links = relationship("EntryLabelDB", back_populates="label", passive_deletes=True)


class EntryDB(Base):
    __tablename__ = "entries"

    __table_args__ = (
        Index("idx_entries_user_subcategory", "user_id", "subcategory_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subcategory_id: Mapped[int] = mapped_column(ForeignKey("subcategories.id", ondelete="CASCADE"), nullable=False)

    # Opaque payload
    name: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    description: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    amount: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    creation_time: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    time_of_expense: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    attachment: Mapped[Optional[bytes]] = mapped_column(LargeBinary)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = relationship("UserDB", back_populates="entries")
    subcategory = relationship("SubcategoryDB", back_populates="entries")
    label_links = relationship("EntryLabelDB", back_populates="entry", passive_deletes=True)


class EntryLabelDB(Base):
    __tablename__ = "entry_labels"

    __table_args__ = (
        # One link per entry/label pair and owner
        Index("entry_labels_unique_idx", "entry_id", "label_id", "user_id", unique=True),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("entries.id", ondelete="CASCADE"), nullable=False)
    label_id: Mapped[int] = mapped_column(ForeignKey("labels.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    entry = relationship("EntryDB", back_populates="label_links")
    label = relationship("LabelDB", back_populates="entry_links")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves FK enforcement (and ON DELETE CASCADE) off per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(DATABASE_URL, echo=os.getenv("SQL_ECHO", "false").lower() == "true")
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
