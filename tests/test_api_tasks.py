from datetime import date, timedelta

import pytest


@pytest.fixture
def alice(register):
    return register()


@pytest.fixture
def bob(register):
    return register(email="bob@example.com", first_name="Bob", last_name="Brown")


@pytest.fixture
def team_id(client, alice, bob):
    response = client.post("/teams/", json={"name": "Platform"}, headers=alice[1])
    team_id = response.json()["data"]["id"]
    client.post(f"/teams/{team_id}/members", json={"email": "bob@example.com"}, headers=alice[1])
    return team_id


def create_task(client, headers, **payload):
    return client.post("/tasks/", json=payload, headers=headers)


def test_create_task_payload(client, alice, bob, team_id):
    due = (date.today() + timedelta(days=3)).isoformat()
    response = create_task(client, alice[1], teamId=team_id, title="Ship it", dueDate=due, assignedTo=bob[0])

    data = response.json()["data"]
    assert response.status_code == 201
    assert data["status"] == "Pending"
    assert data["dueDate"] == due
    assert data["createdBy"] == alice[0]
    assert data["assignee"]["email"] == "bob@example.com"
    assert data["isOverdue"] is False


def test_create_task_validation(client, alice, team_id):
    response = create_task(client, alice[1], teamId=team_id, title="x", status="Done")

    fields = {detail["field"] for detail in response.json()["details"]}
    assert response.status_code == 400
    assert {"title", "status"} <= fields


def test_outsider_cannot_create(client, register, team_id):
    _, headers = register(email="olga@example.com", first_name="Olga")
    response = create_task(client, headers, teamId=team_id, title="Sneaky")

    assert response.status_code == 403
    assert response.json()["message"] == "You are not a member of this team"


def test_status_change_rules(client, alice, bob, team_id):
    task_id = create_task(client, bob[1], teamId=team_id, title="Release").json()["data"]["id"]

    denied = client.put(f"/tasks/{task_id}/status", json={"status": "Completed"}, headers=bob[1])
    allowed = client.put(f"/tasks/{task_id}/status", json={"status": "Completed"}, headers=alice[1])

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["data"]["status"] == "Completed"


def test_update_task(client, alice, bob, team_id):
    task_id = create_task(client, alice[1], teamId=team_id, title="Draft", description="v1",
                          assignedTo=bob[0]).json()["data"]["id"]

    updated = client.put(f"/tasks/{task_id}", json={"title": "Final", "assignedTo": None}, headers=bob[1])
    empty = client.put(f"/tasks/{task_id}", json={}, headers=bob[1])

    data = updated.json()["data"]
    assert updated.status_code == 200
    assert data["title"] == "Final"
    assert data["assignedTo"] is None
    assert data["description"] == "v1"
    assert empty.status_code == 400
    assert empty.json()["message"] == "No valid fields to update"


def test_list_tasks_query_params(client, alice, bob, team_id):
    create_task(client, alice[1], teamId=team_id, title="For Bob", assignedTo=bob[0])
    create_task(client, alice[1], teamId=team_id, title="Unassigned")

    mine = client.get("/tasks/", params={"teamId": team_id, "assignedTo": bob[0]}, headers=bob[1])
    pending = client.get("/tasks/", params={"status": "Pending", "search": "unassig"}, headers=bob[1])

    assert [t["title"] for t in mine.json()["data"]] == ["For Bob"]
    assert [t["title"] for t in pending.json()["data"]] == ["Unassigned"]
    assert client.get("/tasks/", params={"limit": 0}, headers=bob[1]).status_code == 400


def test_get_and_delete_task(client, register, alice, team_id):
    task_id = create_task(client, alice[1], teamId=team_id, title="Temp").json()["data"]["id"]
    _, outsider = register(email="olga@example.com", first_name="Olga")

    assert client.get(f"/tasks/{task_id}", headers=outsider).status_code == 403
    assert client.get("/tasks/999", headers=alice[1]).status_code == 404
    assert client.delete(f"/tasks/{task_id}", headers=alice[1]).status_code == 200
    assert client.get(f"/tasks/{task_id}", headers=alice[1]).status_code == 404
