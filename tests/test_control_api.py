"""Tests for the control API."""
import logging

import pytest
from fastapi.testclient import TestClient

from churnbird.config import TurnoverConfig
from churnbird.control_api import ControlAPI
from churnbird.engine import TurnoverEngine
from churnbird.prom_exporter import PopulationCollector


def make_client(population, rate=6):
    engine = TurnoverEngine(population, TurnoverConfig(rate=rate))
    collector = PopulationCollector(population)
    return TestClient(ControlAPI(engine, collector).app), engine, collector


def test_healthz(population):
    client, _, _ = make_client(population)
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_status_reports_population(population):
    client, _, collector = make_client(population)
    collector.collect()

    body = client.get("/status").json()

    assert body["seed"] == 42
    assert body["families"] == len(population.families)
    assert body["total_series"] == population.total_series
    assert body["family_sizes"] == [
        {"name": f.name, "size": len(f.series)} for f in population.families
    ]
    assert sum(entry["size"] for entry in body["family_sizes"]) == population.total_series
    assert body["fixed_label"] == {"name": "fixed_label", "cardinality": 2}
    assert body["turnover"]["rate"] == 6
    assert body["turnover"]["cycles"] == 0
    assert body["scrapes"] == 1


def test_trigger_turnover(population):
    client, engine, _ = make_client(population)

    response = client.post("/control/turnover")

    assert response.status_code == 200
    assert response.json()["cycles"] == 1
    assert engine.cycle_count == 1


def test_trigger_turnover_when_disabled(population):
    before = [[id(s) for s in f.series] for f in population.families]
    client, engine, _ = make_client(population, rate=0)

    response = client.post("/control/turnover")

    assert response.status_code == 409
    assert engine.cycle_count == 0
    assert [[id(s) for s in f.series] for f in population.families] == before


@pytest.fixture
def restore_log_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_set_log_level(population, restore_log_level):
    client, _, _ = make_client(population)

    response = client.post("/control/loglevel", json={"level": "debug"})

    assert response.status_code == 200
    assert response.json()["level"] == "DEBUG"
    assert logging.getLogger().level == logging.DEBUG


def test_set_invalid_log_level(population, restore_log_level):
    client, _, _ = make_client(population)
    response = client.post("/control/loglevel", json={"level": "loud"})
    assert response.status_code == 400
