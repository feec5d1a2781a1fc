import pytest
from fastapi.testclient import TestClient

from wc26.main import app
from wc26.services.combination_table import CombinationTable, get_combination_table
from wc26.services.group_rules import GROUP_IDS
from wc26.services.priority_rules import build_fallback_templates


@pytest.fixture(name="bindings")
def bindings_fixture():
    """Winner / runner-up / third-place maps for all 12 groups.

    Names encode position + group ("W-E" = winner of E) so a resolved
    matchup can be read back to its slot reference.
    """
    winners = {g: f"W-{g}" for g in GROUP_IDS}
    runners_up = {g: f"R-{g}" for g in GROUP_IDS}
    third_place = {g: f"T-{g}" for g in GROUP_IDS}
    return winners, runners_up, third_place


@pytest.fixture(name="client_table")
def client_table_fixture():
    """Table served to the API: one populated combination (ABCDEFGH)."""
    return CombinationTable(
        {"ABCDEFGH": tuple(build_fallback_templates(frozenset("ABCDEFGH")))},
        source="test",
    )


@pytest.fixture(name="client")
def client_fixture(client_table: CombinationTable):
    """Test client with the combination table dependency overridden

    Override MUST be set before TestClient() so request handling never
    touches the bundled data file.
    """
    app.dependency_overrides[get_combination_table] = lambda: client_table

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
