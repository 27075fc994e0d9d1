from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from vitrine.db.counters import create_tables
from vitrine.ingest.csv_text import parse_csv

FIXTURES = Path(__file__).parent / "fixtures"
PLACEHOLDER = "/thumbs/_placeholder.webp"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def brand_records():
    return parse_csv(load_fixture("brands.csv"))


@pytest.fixture()
def master_records():
    return parse_csv(load_fixture("master.csv"))


@pytest.fixture()
def public_dir(tmp_path):
    public = tmp_path / "public"
    (public / "thumbs").mkdir(parents=True)
    (public / "thumbs" / "bags.webp").write_bytes(b"webp")
    return public
