import json
from unittest import mock

import pytest

from spannerdbal.driver import Driver
from spannerdbal.tools.probe import main, probe


@pytest.fixture
def driver():
    client = mock.MagicMock()
    instance = client.instance.return_value
    instance.exists.return_value = True
    dbs = []
    for name in ("users-db", "events-db"):
        d = mock.Mock()
        d.name = f"projects/p/instances/inst/databases/{name}"
        dbs.append(d)
    instance.list_databases.return_value = dbs
    return Driver(client_factory=lambda project=None, credentials=None: client)


def test_probe_lists_databases(driver):
    report = probe(instance="inst", dbname="users-db", driver=driver)
    assert report.databases == ["events-db", "users-db"]
    assert report.dbname_exists is True


def test_main_json(driver, capsys):
    assert main(["--instance", "inst", "--json"], driver=driver) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["instance"] == "inst"
    assert out["databases"] == ["events-db", "users-db"]
    assert out["dbname"] is None


def test_main_missing_database(driver, capsys):
    assert main(["--instance", "inst", "--dbname", "nope"], driver=driver) == 1
    assert "nope" in capsys.readouterr().out


def test_main_configuration_error(capsys):
    d = Driver(client_factory=mock.Mock(return_value=mock.MagicMock(**{"instance.return_value.exists.return_value": False})))
    assert main(["--instance", "ghost"], driver=d) == 2
    assert "Instance 'ghost' does not exist." in capsys.readouterr().err
