"""
Tests for the task board.
"""

import uuid
from fastapi.testclient import TestClient

from factories import create_chapter


def _create_task(client: TestClient, **payload) -> dict:
    payload.setdefault("title", "Read five papers")
    response = client.post("/api/tasks", json=payload)
    assert response.status_code == 201
    return response.json()


def test_new_task_defaults(thesis_client: TestClient):
    task = _create_task(thesis_client, priority="high")

    assert task["status"] == "todo"
    assert task["completed"] is False
    assert task["priority"] == "high"
    assert task["order_index"] == 0
    assert _create_task(thesis_client)["order_index"] == 1


def test_completed_follows_status(thesis_client: TestClient):
    task = _create_task(thesis_client)
    url = f"/api/tasks/{task['id']}"

    done = thesis_client.patch(url, json={"status": "done"}).json()
    assert done["completed"] is True

    moved = thesis_client.patch(url, json={"status": "review"}).json()
    assert moved["completed"] is False


def test_status_wins_over_conflicting_completed_flag(thesis_client: TestClient):
    task = _create_task(thesis_client)

    data = thesis_client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress", "completed": True}).json()

    assert data["status"] == "in_progress"
    assert data["completed"] is False


def test_checkbox_toggle_moves_task_between_columns(thesis_client: TestClient):
    task = _create_task(thesis_client)
    url = f"/api/tasks/{task['id']}"

    checked = thesis_client.patch(url, json={"completed": True}).json()
    assert (checked["status"], checked["completed"]) == ("done", True)

    unchecked = thesis_client.patch(url, json={"completed": False}).json()
    assert (unchecked["status"], unchecked["completed"]) == ("todo", False)


def test_task_chapter_must_belong_to_thesis(thesis_client: TestClient):
    response = thesis_client.post("/api/tasks", json={"title": "Orphan", "chapter_id": str(uuid.uuid4())})

    assert response.status_code == 404


def test_tasks_page_lists_tasks_and_chapters(thesis_client: TestClient):
    chapter = create_chapter(thesis_client)
    _create_task(thesis_client, chapter_id=chapter["id"])

    page = thesis_client.get("/api/tasks").json()

    assert len(page["tasks"]) == 1
    assert page["tasks"][0]["chapter_id"] == chapter["id"]
    assert [c["id"] for c in page["chapters"]] == [chapter["id"]]


def test_delete_task(thesis_client: TestClient):
    task = _create_task(thesis_client)

    assert thesis_client.delete(f"/api/tasks/{task['id']}").status_code == 204
    assert thesis_client.delete(f"/api/tasks/{task['id']}").status_code == 404
