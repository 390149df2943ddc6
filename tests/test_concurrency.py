"""
Llamadas concurrentes contra una base SQLite en archivo.

Cada worker usa su propia sesión, como lo haría una petición.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import event

from app.config.database import create_db_engine, create_session_factory, init_db
from app.core.exceptions import (
    NoActiveReceptionError, NoProductsInReceptionError, ReceptionInProgressError
)
from app.modules.pvz.repository import PVZRepository
from app.modules.pvz.schemas import City, ProductType, ReceptionStatus
from app.shared.clock import Clock
from app.shared.database.models import Product, Reception


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pvz.db'}")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def locking_session_factory(tmp_path):
    """SQLite ignora FOR UPDATE; BEGIN IMMEDIATE toma el lock de escritura al iniciar"""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pvz-locking.db'}")

    @event.listens_for(engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


def _run_concurrently(session_factory, clock, workers, action):
    barrier = threading.Barrier(workers)

    def worker(index):
        session = session_factory()
        try:
            barrier.wait()
            return action(PVZRepository(session, clock), index)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(worker, range(workers)))


def _count(session_factory, query):
    check = session_factory()
    try:
        return query(check).count()
    finally:
        check.close()


def test_two_concurrent_opens_exactly_one_wins(file_session_factory):
    clock = Clock()
    setup = file_session_factory()
    pvz = PVZRepository(setup, clock).create_pvz(City.KAZAN)
    setup.close()

    def open_reception(repository, _):
        try:
            return repository.open_reception(pvz.id)
        except ReceptionInProgressError as e:
            return e

    outcomes = _run_concurrently(file_session_factory, clock, 2, open_reception)

    conflicts = [o for o in outcomes if isinstance(o, ReceptionInProgressError)]
    receptions = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(receptions) == 1
    assert len(conflicts) == 1

    assert _count(file_session_factory, lambda s: s.query(Reception).filter(
        Reception.pvz_id == pvz.id,
        Reception.status == ReceptionStatus.IN_PROGRESS.value
    )) == 1


def test_concurrent_appends_are_all_recorded(file_session_factory):
    clock = Clock()
    setup = file_session_factory()
    repository = PVZRepository(setup, clock)
    pvz = repository.create_pvz(City.MOSCOW)
    reception = repository.open_reception(pvz.id)
    setup.close()

    def append_many(repository, _):
        return [repository.append_product(pvz.id, ProductType.CLOTHES) for _ in range(5)]

    batches = _run_concurrently(file_session_factory, clock, 4, append_many)

    assert all(p.reception_id == reception.id for batch in batches for p in batch)
    assert _count(file_session_factory, lambda s: s.query(Product).filter(
        Product.reception_id == reception.id
    )) == 20


def test_different_pvz_proceed_independently(file_session_factory):
    clock = Clock()
    setup = file_session_factory()
    repository = PVZRepository(setup, clock)
    pvz_ids = [repository.create_pvz(City.SAINT_PETERSBURG).id for _ in range(4)]
    setup.close()

    def full_cycle(repository, index):
        pvz_id = pvz_ids[index]
        reception = repository.open_reception(pvz_id)
        for _ in range(3):
            repository.append_product(pvz_id, ProductType.SHOES)
        repository.remove_last_product(pvz_id)
        return reception, repository.close_reception(pvz_id)

    outcomes = _run_concurrently(file_session_factory, clock, 4, full_cycle)

    for index, (opened, closed) in enumerate(outcomes):
        assert opened.pvz_id == pvz_ids[index]
        assert closed.id == opened.id
        assert closed.status == ReceptionStatus.CLOSED
        assert _count(file_session_factory, lambda s: s.query(Product).filter(
            Product.reception_id == opened.id
        )) == 2


def test_concurrent_removals_delete_each_product_once(locking_session_factory):
    clock = Clock()
    setup = locking_session_factory()
    repository = PVZRepository(setup, clock)
    pvz = repository.create_pvz(City.MOSCOW)
    repository.open_reception(pvz.id)
    for _ in range(3):
        repository.append_product(pvz.id, ProductType.ELECTRONICS)
    setup.close()

    def remove_last(repository, _):
        try:
            repository.remove_last_product(pvz.id)
        except NoProductsInReceptionError as e:
            return e
        return None

    outcomes = _run_concurrently(locking_session_factory, clock, 4, remove_last)

    assert outcomes.count(None) == 3
    assert len([o for o in outcomes if isinstance(o, NoProductsInReceptionError)]) == 1
    assert _count(locking_session_factory, lambda s: s.query(Product)) == 0


def test_concurrent_closes_exactly_one_wins(locking_session_factory):
    clock = Clock()
    setup = locking_session_factory()
    repository = PVZRepository(setup, clock)
    pvz = repository.create_pvz(City.KAZAN)
    opened = repository.open_reception(pvz.id)
    setup.close()

    def close(repository, _):
        try:
            return repository.close_reception(pvz.id)
        except NoActiveReceptionError as e:
            return e

    outcomes = _run_concurrently(locking_session_factory, clock, 3, close)

    closed = [o for o in outcomes if not isinstance(o, Exception)]
    assert [c.id for c in closed] == [opened.id]
    assert len([o for o in outcomes if isinstance(o, NoActiveReceptionError)]) == 2
    assert _count(locking_session_factory, lambda s: s.query(Reception).filter(
        Reception.status == ReceptionStatus.IN_PROGRESS.value
    )) == 0
