from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.dialects import mysql
from sqlalchemy.schema import CreateTable

from app.database.connection import Base, create_session_factory
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.product_service import (
    create_product, get_product, list_products,
    update_product, delete_product,
)


def _create_test_product(db, name="Test Product", price=10.0, description="created by test"):
    payload = ProductCreate(name=name, price=price, description=description)
    return create_product(db, payload)


def test_create_then_get_returns_submitted_fields(db):
    product_id = _create_test_product(db, name="Lamp", price=24.5, description="Desk lamp")

    fetched = get_product(db, product_id)
    assert fetched is not None
    assert fetched.id == product_id
    assert fetched.name == "Lamp"
    assert fetched.price == pytest.approx(24.5)
    assert fetched.description == "Desk lamp"
    assert fetched.created_at is not None


def test_create_accepts_missing_description(db):
    product_id = create_product(db, ProductCreate(name="Bare", price=1.0))

    assert get_product(db, product_id).description is None


def test_create_assigns_distinct_ids(db):
    first = _create_test_product(db, name="One")
    second = _create_test_product(db, name="Two")

    assert first != second


def test_get_missing_product_returns_none(db):
    assert get_product(db, 999999) is None


def test_list_empty_table(db):
    assert list_products(db) == []


def test_list_orders_newest_first(db):
    ids = [_create_test_product(db, name=f"Item {i}") for i in range(4)]

    products = list_products(db)
    assert [p.id for p in products] == list(reversed(ids))

    stamps = [p.created_at for p in products]
    assert all(a >= b for a, b in zip(stamps, stamps[1:]))


def test_list_breaks_timestamp_ties_by_id(db):
    first = _create_test_product(db, name="Early")
    second = _create_test_product(db, name="Late")
    stamp = get_product(db, first).created_at
    db.query(Product).update({Product.created_at: stamp})
    db.commit()

    assert [p.id for p in list_products(db)] == [second, first]


def test_update_overwrites_all_fields(db):
    product_id = _create_test_product(db, name="Old", price=5.0, description="old text")

    affected = update_product(db, product_id, ProductUpdate(name="A", price=1.0, description="first"))
    assert affected == 1
    affected = update_product(db, product_id, ProductUpdate(name="B", price=2.0, description=None))
    assert affected == 1

    fetched = get_product(db, product_id)
    assert fetched.name == "B"
    assert fetched.price == pytest.approx(2.0)
    assert fetched.description is None


def test_update_missing_product_changes_nothing(db):
    product_id = _create_test_product(db, name="Untouched", price=3.0)

    affected = update_product(db, 999999, ProductUpdate(name="X", price=0.0, description="x"))

    assert affected == 0
    products = list_products(db)
    assert len(products) == 1
    assert products[0].id == product_id
    assert products[0].name == "Untouched"


def test_delete_then_get_returns_none(db):
    product_id = _create_test_product(db)

    assert delete_product(db, product_id) == 1
    assert get_product(db, product_id) is None


def test_delete_missing_product_changes_nothing(db):
    _create_test_product(db)

    assert delete_product(db, 999999) == 0
    assert len(list_products(db)) == 1


def test_values_are_bound_not_interpolated(db):
    hostile = "x'); DROP TABLE products; --"
    product_id = _create_test_product(db, name=hostile, description=hostile)

    fetched = get_product(db, product_id)
    assert fetched.name == hostile
    assert len(list_products(db)) == 1


def test_simultaneous_creates_get_distinct_ids(tmp_path):
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrent.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    session_factory = create_session_factory(file_engine)

    def _create(name):
        session = session_factory()
        try:
            return create_product(session, ProductCreate(name=name, price=1.0))
        finally:
            session.close()

    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            ids = list(pool.map(_create, ["Left", "Right"]))

        session = session_factory()
        try:
            products = list_products(session)
        finally:
            session.close()
    finally:
        file_engine.dispose()

    assert len(set(ids)) == 2
    assert {p.id for p in products} == set(ids)
    assert products[0].created_at >= products[1].created_at


def test_price_column_is_double_precision_on_mysql():
    ddl = str(CreateTable(Product.__table__).compile(dialect=mysql.dialect()))

    assert "price DOUBLE NOT NULL" in ddl
    assert "price FLOAT" not in ddl


def test_price_keeps_full_precision(db):
    product_id = _create_test_product(db, price=1234567.89)

    assert get_product(db, product_id).price == 1234567.89
