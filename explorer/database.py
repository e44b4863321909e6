from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from explorer.config import settings

is_sqlite = settings.DATABASE_URL.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_connection, connection_record):
    """
    Replace SQLite's lower(), which only folds ASCII letters.

    SQLAlchemy renders ILIKE as lower(x) LIKE lower(y) on SQLite, so this
    makes case-insensitive search work for names such as 'Ärchiv'.
    """
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


if is_sqlite:
    event.listen(engine, "connect", register_sqlite_functions)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
