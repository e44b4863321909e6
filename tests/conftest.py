import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from explorer.database import Base, get_db, register_sqlite_functions
from explorer.main import create_app
from explorer.models import File, Folder
from explorer.utils.cache import SimpleCache


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", register_sqlite_functions)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SimpleCache(ttl_seconds=30, max_entries=200, clock=clock)


@pytest.fixture
def app(db, cache):
    app = create_app(cache=cache)
    app.dependency_overrides[get_db] = lambda: db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_folder(db):
    def _make(name, parent_id=None):
        folder = Folder(name=name, parent_id=parent_id)
        db.add(folder)
        db.commit()
        db.refresh(folder)
        return folder.id
    return _make


@pytest.fixture
def make_file(db):
    def _make(name, folder_id):
        file = File(name=name, folder_id=folder_id)
        db.add(file)
        db.commit()
        db.refresh(file)
        return file.id
    return _make


@pytest.fixture
def sample_tree(make_folder, make_file):
    """
    Root (1)
      Child (2)
        Grandchild (3)
    Other (4)
    """
    root = make_folder("Root")
    child = make_folder("Child", root)
    grandchild = make_folder("Grandchild", child)
    other = make_folder("Other")
    files = {
        "root.txt": make_file("root.txt", root),
        "child.txt": make_file("child.txt", child),
        "deep.txt": make_file("deep.txt", grandchild),
        "other.txt": make_file("other.txt", other),
    }
    return {"root": root, "child": child, "grandchild": grandchild, "other": other, "files": files}
