import io
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pandas as pd
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.common_models import Column, ColumnType, Table


def make_table(**columns) -> Table:
    """Build a Table from column-name -> list-of-values keyword arguments."""
    names = list(columns)
    n_rows = len(next(iter(columns.values()))) if columns else 0
    rows = [{name: columns[name][i] for name in names} for i in range(n_rows)]
    return Table(
        columns=[Column(name=name, type=ColumnType.STRING) for name in names],
        data=rows,
        row_count=len(rows),
        column_count=len(names),
    )


def sales_csv(n_rows: int = 25) -> bytes:
    lines = ["month,sales,region"]
    for i in range(n_rows):
        lines.append(f"M{i + 1},{(i + 1) * 10},{'North' if i % 2 else 'South'}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def xlsx_bytes(df: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
