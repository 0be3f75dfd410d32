# conftest.py

import os
import pytest
from fastapi.testclient import TestClient

from skill_system.models import Skill, PrerequisiteEdge, SkillGraph
from skill_system.goals import GoalStateManager
from skill_system.storage import InMemoryGoalStore

# --- Environment Configuration ---

def pytest_configure(config):
    """
    Forcefully sets the environment variables for the entire test session.
    Neo4j is never contacted; the session dependency is overridden per test.
    """
    os.environ["DATABASE_URL"] = "sqlite://"
    os.environ["NEO4J_URI"] = "neo4j://localhost:7687"
    os.environ["NEO4J_USERNAME"] = "neo4j"
    os.environ["NEO4J_PASSWORD"] = "testpassword"


# --- Helpers ---

def make_skill(skill_id, xp_required=10, category="magic", level=1):
    return Skill(
        id=skill_id,
        name=skill_id.replace("_", " ").title(),
        category=category,
        level=level,
        xp_required=xp_required,
    )


def make_graph(skill_ids, edges):
    """Builds a SkillGraph from ids and (from, to) tuples."""
    return SkillGraph.build(
        [make_skill(skill_id) for skill_id in skill_ids],
        [PrerequisiteEdge(from_id=a, to_id=b) for a, b in edges],
    )


# --- Fixtures ---

@pytest.fixture
def chain_graph():
    """A -> B -> C"""
    return make_graph(["A", "B", "C"], [("A", "B"), ("B", "C")])


@pytest.fixture
def store():
    return InMemoryGoalStore()


@pytest.fixture
def manager(store):
    return GoalStateManager(store)


@pytest.fixture
def mock_graph_session(mocker):
    """
    A Neo4j session mock whose execute_read runs the transaction function
    against canned data instead of the database.
    """
    from api import graph_crud

    session = mocker.MagicMock(name="MOCK_GRAPH_SESSION")
    session.graph = make_graph(
        ["A", "B", "C", "X"], [("A", "B"), ("B", "C")]
    )
    session.mastered = {"emp1": ["A"], "emp2": ["A"]}

    def execute_read(func, namespace, *args):
        if func is graph_crud.load_skill_graph:
            return session.graph
        if func is graph_crud.get_skill_catalog:
            return list(session.graph.skills.values())
        if func is graph_crud.get_mastered_skills:
            return list(session.mastered.get(args[0], []))
        raise AssertionError(f"Unexpected read {func.__name__}")

    session.execute_read.side_effect = execute_read
    return session


@pytest.fixture
def api_client(mock_graph_session, store):
    """
    Provides a TestClient over an app backed by an in-memory goal store,
    with the Neo4j session dependency overridden.
    """
    from api.main import create_app
    from api.database import get_graph_db_session

    app_instance = create_app(goal_store=store)

    def override_get_graph_db_session():
        yield mock_graph_session

    app_instance.dependency_overrides[get_graph_db_session] = override_get_graph_db_session
    yield TestClient(app_instance)
    app_instance.dependency_overrides.clear()
