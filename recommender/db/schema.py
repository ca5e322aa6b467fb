"""PostgreSQL schema for users, catalog and interaction logs.

Tables are declared with SQLAlchemy and created by ``cli.py init-db``.
Queries at flow time go through asyncpg (see recommender/db_helpers.py).
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import (
    create_engine,
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .pool import DatabaseConfig

Base = declarative_base()


def create_engine_with_url(url: Optional[str] = None):
    """Create SQLAlchemy engine; defaults to the same DSN the asyncpg pool uses."""
    if url is None:
        url = DatabaseConfig().get_dsn()

    return create_engine(url, pool_pre_ping=True, echo=False)


def create_tables(engine):
    """Create all tables in the database."""
    Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    """Drop all tables in the database."""
    Base.metadata.drop_all(bind=engine)


def get_sessionmaker(engine):
    """Return a session factory for the given engine."""
    return sessionmaker(bind=engine)


# ============================================================================
# Catalog
# ============================================================================


class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True)
    name = Column(String, nullable=False)


class Author(Base):
    __tablename__ = "authors"

    # Opaque key (e.g. a catalog URI)
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)


class Song(Base):
    __tablename__ = "songs"

    id = Column(BigInteger, primary_key=True)
    name = Column(String, nullable=False)
    length = Column(Integer)  # seconds
    genre = Column(String)
    author_id = Column(String, ForeignKey("authors.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


# ============================================================================
# Interaction logs (signals)
# ============================================================================


class UserLikedSong(Base):
    __tablename__ = "users_liked_songs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    song_id = Column(BigInteger, ForeignKey("songs.id"), nullable=False)
    event_time = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class UserSavedSong(Base):
    __tablename__ = "users_saved_songs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    song_id = Column(BigInteger, ForeignKey("songs.id"), nullable=False)
    event_time = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


# ============================================================================
# Demo data
# ============================================================================


DEMO_USERS = {"Joe": 10000, "Mike": 10001}

DEMO_AUTHORS = {
    "disturbed": "Disturbed",
    "metallica": "Metallica",
    "godsmack": "Godsmack",
    "acdc": "AC/DC",
    "eminem": "Eminem",
    "yelawolf": "Yelawolf",
}

# id, name, length, genre, author
DEMO_SONGS = [
    (20000, "Immortalized", 258, "Heavy Metal", "disturbed"),
    (20001, "The Sound Of Silence", 246, "Heavy Metal", "disturbed"),
    (20002, "Enter Sandman", 328, "Heavy Metal", "metallica"),
    (20003, "Bulletproof", 147, "Hard Rock", "godsmack"),
    (20004, "Thunderstruck", 256, "Hard Rock", "acdc"),
    (20005, "Rap God", 360, "Hip-Hop", "eminem"),
    (20006, "Best Friend", 270, "Hip-Hop", "yelawolf"),
]


def seed_demo_data(session: Session, now: Optional[datetime] = None) -> None:
    """Insert a small demo catalog with a few recent likes and saves."""
    now = now or datetime.utcnow()

    session.add_all(User(id=user_id, name=name) for name, user_id in DEMO_USERS.items())
    session.add_all(Author(id=author_id, name=name) for author_id, name in DEMO_AUTHORS.items())
    session.flush()

    session.add_all(
        Song(
            id=song_id,
            name=name,
            length=length,
            genre=genre,
            author_id=author_id,
            created_at=now - timedelta(days=len(DEMO_SONGS) - i),
        )
        for i, (song_id, name, length, genre, author_id) in enumerate(DEMO_SONGS)
    )
    session.flush()

    session.add_all([
        UserLikedSong(user_id=DEMO_USERS["Joe"], song_id=20000, event_time=now - timedelta(hours=3)),
        UserLikedSong(user_id=DEMO_USERS["Mike"], song_id=20005, event_time=now - timedelta(hours=5)),
        UserSavedSong(user_id=DEMO_USERS["Joe"], song_id=20002, event_time=now - timedelta(hours=1)),
    ])
    session.commit()
