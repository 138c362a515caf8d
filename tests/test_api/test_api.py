"""
Tests for the Remix Studio HTTP API

Tests for remixstudio/api, driven through FastAPI's TestClient with the
store, model service and lock registry overridden.
"""

import pytest
from fastapi.testclient import TestClient

from remixstudio.api.dependencies import get_lock_registry, get_model_service, get_store, limiter
from remixstudio.api.errors import status_for
from remixstudio.api.main import app
from remixstudio.core.exceptions import (
    AnalysisFailure,
    BoardBusyError,
    BoardNotFoundError,
    ConfigurationError,
    EmptyRemixContextError,
    OrchestrationError,
    PlannerFailure,
    RateLimit,
    RemixStudioError,
    SafetyBlock,
)
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.storage.workspace_store import JsonWorkspaceStore

WORKSPACE = "/api/workspaces/alice"


@pytest.fixture
def locks():
    return BoardLockRegistry()


@pytest.fixture
def client(temp_dir, fake_service, locks):
    store = JsonWorkspaceStore(temp_dir)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_model_service] = lambda: fake_service
    app.dependency_overrides[get_lock_registry] = lambda: locks
    limiter.enabled = False
    yield TestClient(app)
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(client, studio_graph):
    response = client.put(WORKSPACE, json={"name": "Campaigns", **studio_graph.to_dict()})
    assert response.status_code == 200
    return client


class TestStatusMapping:

    @pytest.mark.parametrize("error, status", [
        (BoardNotFoundError("b"), 404),
        (BoardBusyError("b"), 409),
        (EmptyRemixContextError("empty"), 400),
        (OrchestrationError("bad target"), 400),
        (PlannerFailure("no plan"), 502),
        (SafetyBlock("blocked"), 422),
        (RateLimit("slow"), 429),
        (ConfigurationError("no key"), 500),
        (AnalysisFailure("nope"), 502),
        (RemixStudioError("other"), 500),
    ])
    def test_status_for(self, error, status):
        assert status_for(error) == status


class TestMeta:

    def test_root(self, client):
        assert client.get("/").json()["message"] == "Remix Studio API"

    def test_health_lists_busy_boards(self, client):
        BoardLockRegistry.get_instance().acquire("board-remix", "remix")

        body = client.get("/api/health").json()

        assert body == {"status": "healthy", "busyBoards": ["board-remix"]}


class TestWorkspaceRoutes:

    def test_new_owner_gets_empty_workspace(self, client):
        body = client.get(WORKSPACE).json()

        assert body == {"id": "alice", "name": None, "boards": [], "connectors": []}

    def test_put_then_get(self, seeded, studio_graph):
        body = seeded.get(WORKSPACE).json()

        assert body["name"] == "Campaigns"
        assert [board["id"] for board in body["boards"]] == [b.id for b in studio_graph.boards]
        assert len(body["connectors"]) == 2
        assert "createdAt" in body

    def test_put_invalid_snapshot(self, client):
        response = client.put(WORKSPACE, json={"boards": [{"id": "b1", "type": "hologram"}]})

        assert response.status_code == 400

    def test_add_board(self, client):
        response = client.post(f"{WORKSPACE}/boards", json={"type": "remix"})

        assert response.status_code == 201
        assert response.json()["title"] == "Remix Stage"
        assert len(client.get(WORKSPACE).json()["boards"]) == 1

    def test_generate_text_board(self, client, fake_service):
        fake_service.structured_responses = [{"variations": ["One", "Two", "Three", "Four"]}]

        response = client.post(f"{WORKSPACE}/boards/generate", json={"kind": "text", "prompt": "taglines"})

        assert response.status_code == 201
        board = response.json()["board"]
        assert [el["text"] for el in board["elements"]] == ["One", "Two", "Three", "Four"]
        assert client.get(WORKSPACE).json()["boards"][0]["id"] == board["id"]

    def test_generate_requires_prompt(self, client):
        response = client.post(f"{WORKSPACE}/boards/generate", json={"kind": "image", "prompt": " "})

        assert response.status_code == 400

    def test_analyze_board(self, seeded, fake_service):
        fake_service.structured_responses = [{"style": "Minimalist"}] * 3

        response = seeded.post(f"{WORKSPACE}/boards/board-img/analyze")

        assert response.status_code == 200
        stored = seeded.get(WORKSPACE).json()["boards"][0]
        assert stored["elements"][0]["analysis"] == {"style": "Minimalist"}

    def test_delete_board_removes_connectors(self, seeded):
        response = seeded.delete(f"{WORKSPACE}/boards/board-img")

        assert response.json() == {"removed": ["board-img"]}
        connectors = seeded.get(WORKSPACE).json()["connectors"]
        assert [c["fromBoard"] for c in connectors] == ["board-brand"]

    def test_delete_unknown_board(self, seeded):
        assert seeded.delete(f"{WORKSPACE}/boards/nope").status_code == 404

    def test_delete_busy_board(self, seeded, locks):
        locks.acquire("board-remix", "remix")

        response = seeded.delete(f"{WORKSPACE}/boards/board-remix")

        assert response.status_code == 409
        assert response.json()["detail"] == "This board is already generating. Wait for it to finish."

    def test_scoped_connector(self, seeded):
        response = seeded.put(f"{WORKSPACE}/connectors", json={
            "fromBoard": "board-img", "toBoard": "board-remix", "elementIds": ["img-bag", "gone"],
        })

        assert response.json()["elementIds"] == ["img-bag"]
        mentions = seeded.get(f"{WORKSPACE}/boards/board-remix/mentions").json()["mentions"]
        assert mentions == ["Bag", "Logo"]

    def test_connector_to_content_board_is_rejected(self, seeded):
        response = seeded.put(f"{WORKSPACE}/connectors", json={"fromBoard": "board-img", "toBoard": "board-copy"})

        assert response.status_code == 400

    def test_delete_connector(self, seeded):
        url = f"{WORKSPACE}/connectors"

        assert seeded.delete(url, params={"fromBoard": "board-img", "toBoard": "board-remix"}).json() == {
            "success": True
        }
        assert seeded.delete(url, params={"fromBoard": "board-img", "toBoard": "board-remix"}).status_code == 404


class TestRemixRoutes:

    def test_mentions(self, seeded):
        body = seeded.get(f"{WORKSPACE}/boards/board-remix/mentions").json()

        assert body == {"mentions": ["Shoe", "Bag", "Tagline", "Logo"]}

    def test_remix_stores_variations(self, seeded):
        response = seeded.post(f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch"})

        assert response.status_code == 200
        body = response.json()
        assert [el["label"] for el in body["board"]["elements"]] == ["Remix 1", "Remix 2", "Remix 3", "Remix 4"]
        assert len(body["plan"]["tasks"]) == 4
        assert body["progress"][0] == "Creative Director is analyzing the brief..."
        assert body["failures"] == []

        stored = {b["id"]: b for b in seeded.get(WORKSPACE).json()["boards"]}
        assert stored["board-remix"]["remixPrompt"] == "Summer launch"
        assert len(stored["board-remix"]["elements"]) == 4

    def test_remix_partial(self, seeded, fake_service):
        fake_service.image_failures = {"Brief 2": SafetyBlock("blocked")}

        body = seeded.post(
            f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch", "allowPartial": True}
        ).json()

        assert len(body["board"]["elements"]) == 3
        assert body["failures"] == [{"taskId": "task-2", "detail": SafetyBlock.default_user_message}]

    @pytest.mark.parametrize("board_id, prompt, status", [
        ("board-remix", "  ", 400),
        ("board-img", "Summer launch", 400),
        ("missing", "Summer launch", 404),
    ])
    def test_remix_rejections(self, seeded, fake_service, board_id, prompt, status):
        response = seeded.post(f"{WORKSPACE}/boards/{board_id}/remix", json={"prompt": prompt})

        assert response.status_code == status
        assert fake_service.calls == []

    def test_remix_without_inputs(self, seeded):
        seeded.delete(f"{WORKSPACE}/connectors", params={"fromBoard": "board-img", "toBoard": "board-remix"})

        response = seeded.post(f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch"})

        assert response.status_code == 400
        assert response.json()["detail"] == EmptyRemixContextError.default_user_message

    def test_remix_busy(self, seeded, locks):
        locks.acquire("board-remix", "video")

        response = seeded.post(f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch"})

        assert response.status_code == 409

    @pytest.mark.parametrize("error, status", [
        (SafetyBlock("blocked"), 422),
        (RateLimit("slow"), 429),
    ])
    def test_remix_model_errors(self, seeded, fake_service, error, status):
        fake_service.image_failures = {"Brief 1": error}

        response = seeded.post(f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch"})

        assert response.status_code == status
        assert response.json()["detail"] == error.user_message
        stored = {b["id"]: b for b in seeded.get(WORKSPACE).json()["boards"]}
        assert stored["board-remix"]["elements"] == []

    def test_remix_planner_failure(self, seeded, fake_service):
        fake_service.plan_tasks = []

        response = seeded.post(f"{WORKSPACE}/boards/board-remix/remix", json={"prompt": "Summer launch"})

        assert response.status_code == 502

    def test_video_is_appended(self, seeded):
        response = seeded.post(f"{WORKSPACE}/boards/board-img/video", json={"prompt": "waves"})

        assert response.status_code == 200
        element = response.json()["element"]
        assert element["type"] == "video"
        assert element["status"] == "complete"
        stored = {b["id"]: b for b in seeded.get(WORKSPACE).json()["boards"]}
        assert stored["board-img"]["elements"][-1]["id"] == element["id"]
        assert len(stored["board-img"]["elements"]) == 4

    def test_video_requires_prompt(self, seeded):
        assert seeded.post(f"{WORKSPACE}/boards/board-img/video", json={"prompt": ""}).status_code == 400


class TestGenieRoute:

    def test_reply(self, seeded, fake_service):
        response = seeded.post("/api/genie", json={
            "message": "Make it punchy",
            "goal": "Summer launch",
            "history": [{"role": "user", "text": "Hi"}, {"role": "genie", "text": "Hello!"}],
            "owner": "alice",
            "remixBoardId": "board-remix",
        })

        assert response.json() == {"reply": "Here is a sharper brief."}
        (_, prompt, _), = fake_service.calls_of("text")
        assert "Make it punchy" in prompt
        assert "Product Shots" in prompt

    def test_blank_message(self, client):
        assert client.post("/api/genie", json={"message": "  "}).status_code == 400

    def test_unknown_remix_board(self, seeded):
        response = seeded.post("/api/genie", json={
            "message": "Hi", "owner": "alice", "remixBoardId": "missing",
        })

        assert response.status_code == 404
