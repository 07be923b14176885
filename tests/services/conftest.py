"""Service test fixtures — project context with sample records, fake collaborators.

Invariants:
    - Every test gets a fresh ProjectState (no cross-test leakage)
    - Proxy and Cypher collaborators are in-process fakes recording their calls
    - The real ScriptSandbox is used: scripts run in QuickJS exactly as in production

Design Decisions:
    - Fakes over MagicMock for collaborators: assertions read the recorded calls directly
"""

import json

import pytest

from app.core.domain_models import DatasetRecord
from app.core.project_context import ProjectContext
from app.core.project_state import ProjectState
from app.infrastructure.script_sandbox import ScriptSandbox


def make_records() -> list[DatasetRecord]:
    """Three records: two JSON API calls and one HTML page."""
    return [
        DatasetRecord(
            index=0, id="r0", method="GET",
            url="https://shop.test/api/products?page=1",
            status=200, size=120, mime_type="application/json",
            response_body_text=json.dumps({
                "items": [
                    {"id": "p1", "name": "Lamp", "price": 30},
                    {"id": "p2", "name": "Desk", "price": 120},
                ],
            }),
        ),
        DatasetRecord(
            index=1, id="r1", method="POST",
            url="https://shop.test/api/graphql",
            status=200, size=80, mime_type="application/json",
            request_body_text=json.dumps({"query": "{ orders { id } }"}),
            response_body_text=json.dumps({"data": {"orders": [{"id": "o1", "productId": "p1"}]}}),
        ),
        DatasetRecord(
            index=2, id="r2", method="GET",
            url="https://shop.test/about",
            status=404, size=40, mime_type="text/html",
            response_body_text="<html>not here</html>",
        ),
    ]


class FakeProxy:
    def __init__(self, response=None):
        self.calls = []
        self.response = response or {"status": 200, "content": '{"ok": true}'}

    async def execute(self, url, method, headers=None, body=None):
        self.calls.append({"url": url, "method": method, "headers": headers, "body": body})
        return self.response


class FakeCypher:
    def __init__(self, rows=None):
        self.queries = []
        self.rows = rows if rows is not None else [{"n": 1}]

    async def run(self, query, params=None):
        self.queries.append(query)
        return self.rows


@pytest.fixture
def state():
    return ProjectState(records=make_records())


@pytest.fixture
def fake_proxy():
    return FakeProxy()


@pytest.fixture
def fake_cypher():
    return FakeCypher()


@pytest.fixture
def ctx(state, fake_proxy, fake_cypher):
    return ProjectContext(
        project_id="project-test",
        state=state,
        sandbox=ScriptSandbox(time_limit_seconds=1.0),
        proxy=fake_proxy,
        cypher=fake_cypher,
    )


@pytest.fixture
def bare_ctx(state):
    """Context with no sandbox, proxy or Neo4j configured."""
    return ProjectContext(project_id="project-bare", state=state)
