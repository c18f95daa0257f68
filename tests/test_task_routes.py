from services import task_routes
from services import task_source
from services.task_source import TaskSourceError


TASK = {
    "title": "Standup",
    "description": "Daily sync",
    "image_url": "https://example.com/standup.png",
    "start_date": "2024-06-03",
    "start_time": "09:00",
    "end_date": "2024-06-03",
    "end_time": "10:30",
    "all_day": False,
}


def test_tasks_require_sign_in(client):
    assert client.get("/api/tasks").status_code == 401
    assert client.post("/api/tasks", json=TASK).status_code == 401
    assert client.get("/api/tasks/week").status_code == 401


def test_create_then_fetch_round_trip(auth_client):
    res = auth_client.post("/api/tasks", json=TASK)
    assert res.status_code == 201
    body = res.get_json()
    assert body["message"] == "Task added successfully"
    task_id = body["task"]["id"]

    fetched = auth_client.get(f"/api/tasks/{task_id}").get_json()["task"]
    for key, value in TASK.items():
        assert fetched[key] == value
    assert fetched["user_id"] == auth_client.user_id

    listed = auth_client.get("/api/tasks").get_json()["tasks"]
    assert [t["id"] for t in listed] == [task_id]


def test_create_rejects_end_before_start(auth_client):
    res = auth_client.post("/api/tasks", json=dict(TASK, end_time="09:00"))
    assert res.status_code == 400
    assert res.get_json()["error"] == "End time must be after start time."
    assert auth_client.get("/api/tasks").get_json()["tasks"] == []


def test_create_rejects_missing_fields(auth_client):
    res = auth_client.post("/api/tasks", json={"title": "No dates"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Missing required fields"


def test_update_in_place(auth_client):
    task_id = auth_client.post("/api/tasks", json=TASK).get_json()["task"]["id"]
    res = auth_client.put(f"/api/tasks/{task_id}", json={"title": "Retro", "end_time": "11:00"})
    assert res.status_code == 200
    task = auth_client.get(f"/api/tasks/{task_id}").get_json()["task"]
    assert task["title"] == "Retro"
    assert task["end_time"] == "11:00"
    assert task["start_time"] == "09:00"

    res = auth_client.put(f"/api/tasks/{task_id}", json={"start_time": "12:00"})
    assert res.status_code == 400


def test_delete(auth_client):
    task_id = auth_client.post("/api/tasks", json=TASK).get_json()["task"]["id"]
    res = auth_client.delete(f"/api/tasks/{task_id}")
    assert res.get_json()["message"] == "Task deleted"
    assert auth_client.get(f"/api/tasks/{task_id}").status_code == 404
    assert auth_client.delete(f"/api/tasks/{task_id}").status_code == 404


def test_other_users_tasks_are_not_visible(auth_client, make_user, make_task):
    other_id = make_user(name="Eve", email="eve@example.com")
    task_id = make_task(other_id)
    assert auth_client.get(f"/api/tasks/{task_id}").status_code == 404
    assert auth_client.put(f"/api/tasks/{task_id}", json={"title": "mine"}).status_code == 404
    assert auth_client.get("/api/tasks").get_json()["tasks"] == []


def test_week_grid_endpoint(auth_client, make_task):
    make_task(auth_client.user_id)
    make_task(auth_client.user_id, title="Offsite", start_time="00:00", end_time="23:59",
              start_date="2024-06-05", end_date="2024-06-05", all_day=True)
    res = auth_client.get("/api/tasks/week?date=2024-06-03")
    assert res.status_code == 200
    data = res.get_json()
    assert data["state"] == "ready"
    assert data["dates"][0] == "2024-06-02"
    assert len(data["placements"]) == 1
    placement = data["placements"][0]
    assert (placement["day"], placement["hour"]) == ("2024-06-03", 9)
    assert (placement["top"], placement["height"]) == (0, 150)
    assert [p["title"] for p in data["all_day"]["2024-06-05"]] == ["Offsite"]


def test_week_grid_rejects_bad_date(auth_client):
    assert auth_client.get("/api/tasks/week?date=junk").status_code == 400


def test_week_grid_reports_fetch_failure(auth_client, monkeypatch):
    def failing_source(user_id):
        raise TaskSourceError("database unavailable")

    monkeypatch.setattr(task_routes, "fetch_tasks", failing_source)
    res = auth_client.get("/api/tasks/week?date=2024-06-03")
    assert res.status_code == 500
    data = res.get_json()
    assert data["state"] == "error"
    assert "placements" not in data


def test_unknown_api_path_returns_json_404(client):
    res = client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Not found"}


def test_non_object_body_is_rejected(auth_client):
    res = auth_client.post("/api/tasks", json=["not", "an", "object"])
    assert res.status_code == 400
    assert res.get_json()["error"] == "Request body must be a JSON object"

    task_id = auth_client.post("/api/tasks", json=TASK).get_json()["task"]["id"]
    res = auth_client.put(f"/api/tasks/{task_id}", json="Retro")
    assert res.status_code == 400
    assert auth_client.get(f"/api/tasks/{task_id}").get_json()["task"]["title"] == "Standup"


def test_task_list_matches_calendar_source_order(app, auth_client, make_task):
    late = make_task(auth_client.user_id, title="Late", start_time="15:00", end_time="16:00")
    early_next_day = make_task(auth_client.user_id, title="Next", start_date="2024-06-04",
                               end_date="2024-06-04", start_time="08:00", end_time="09:00")
    early = make_task(auth_client.user_id, title="Early", start_time="08:00", end_time="09:00")

    listed = [t["id"] for t in auth_client.get("/api/tasks").get_json()["tasks"]]
    with app.app_context():
        fetched = [t.id for t in task_source.fetch_tasks(auth_client.user_id)]
    assert listed == fetched == [early, late, early_next_day]
