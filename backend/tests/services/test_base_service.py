from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from weddinglens.core.exceptions import ServiceException, ValidationException
from weddinglens.models.catalog import Photographer
from weddinglens.services.base import BaseService


class _TimedService(BaseService):
    @BaseService.measure_operation("ping")
    def ping(self, fail: bool = False) -> str:
        if fail:
            raise ValidationException("bad ping")
        return "ok"


def _add(db, name):
    db.add(Photographer(name=name, location="Jaipur"))
    db.flush()


def test_nested_transactions_join_the_outer_one(db):
    outer = _TimedService(db)
    inner = _TimedService(db)

    with outer.transaction():
        _add(db, "Outer")
        with inner.transaction():
            _add(db, "Inner")
        assert db.info["weddinglens_tx_depth"] == 1

    assert db.info["weddinglens_tx_depth"] == 0
    assert {p.name for p in db.query(Photographer).all()} == {"Outer", "Inner"}


def test_failure_in_nested_block_rolls_back_everything(db):
    service = _TimedService(db)

    with pytest.raises(ValidationException):
        with service.transaction():
            _add(db, "Outer")
            with service.transaction():
                _add(db, "Inner")
                raise ValidationException("nope")

    assert db.query(Photographer).count() == 0
    assert db.info["weddinglens_tx_depth"] == 0


def test_database_errors_become_service_exceptions(db):
    service = _TimedService(db)

    with pytest.raises(ServiceException) as exc_info:
        with service.transaction():
            _add(db, "Doomed")
            raise OperationalError("INSERT", {}, Exception("database is locked"))

    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert db.query(Photographer).count() == 0


def test_measure_operation_tracks_outcomes(db):
    service = _TimedService(db)

    assert service.ping() == "ok"
    with pytest.raises(ValidationException):
        service.ping(fail=True)

    metrics = service.get_metrics()["ping"]
    assert metrics["count"] >= 2
    assert 0 < metrics["success_rate"] < 1
