ZIP_BYTES = b"PK\x03\x04 delivery archive"


async def create_project(client, headers, title="Analytics dashboard"):
    resp = await client.post(
        "/api/projects",
        json={"title": title, "description": "Dashboards for sales", "requirements": "React", "budget": 1200},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def request_project(client, headers, project_id):
    return await client.post(
        "/api/requests", json={"project_id": project_id, "message": "Interested"}, headers=headers
    )


async def test_health_and_root(client):
    assert (await client.get("/health")).json() == {"status": "OK"}
    assert (await client.get("/")).json()["success"] is True


async def test_missing_token_uses_error_envelope(client):
    resp = await client.get("/api/projects")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Not authorized to access this route"}

    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired token"


async def test_register_login_and_me(client):
    resp = await client.post(
        "/api/auth/register",
        json={"email": "jane@example.com", "password": "secret1", "name": "Jane"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "problem_solver"

    resp = await client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret1"})
    token = resp.json()["data"]["token"]
    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["email"] == "jane@example.com"
    assert "password_hash" not in me.json()["data"]

    resp = await client.post("/api/auth/token", data={"username": "jane@example.com", "password": "secret1"})
    assert resp.json()["token_type"] == "bearer"

    resp = await client.post("/api/auth/login", json={"email": "jane@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


async def test_body_validation_maps_to_400(client, buyer, auth_headers):
    resp = await client.post("/api/projects", json={"title": "No description"}, headers=auth_headers(buyer))
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_full_marketplace_flow(client, buyer, solver, other_solver, auth_headers):
    b, s1, s2 = auth_headers(buyer), auth_headers(solver), auth_headers(other_solver)

    project = await create_project(client, b)
    project_id = project["project_id"]
    assert project["status"] == "open"

    # 兩位解題者都能看到並申請招募中的案件
    listed = await client.get("/api/projects", params={"status": "open"}, headers=s2)
    assert [p["project_id"] for p in listed.json()["data"]] == [project_id]
    r1 = (await request_project(client, s1, project_id)).json()["data"]
    r2 = (await request_project(client, s2, project_id)).json()["data"]

    resp = await client.patch(f"/api/requests/{r1['request_id']}/accept", headers=b)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "accepted"

    requests = (await client.get(f"/api/requests/project/{project_id}", headers=b)).json()["data"]
    statuses = {r["request_id"]: r["status"] for r in requests}
    assert statuses == {r1["request_id"]: "accepted", r2["request_id"]: "rejected"}

    project = (await client.get(f"/api/projects/{project_id}", headers=b)).json()["data"]
    assert project["status"] == "assigned"
    assert project["assigned_solver_id"] == solver.user_id

    # 被拒絕的解題者已看不到這個案件
    resp = await client.get(f"/api/projects/{project_id}", headers=s2)
    assert resp.status_code == 403

    resp = await client.post(
        "/api/tasks", json={"project_id": project_id, "title": "Wireframes"}, headers=s1
    )
    assert resp.status_code == 201
    task = resp.json()["data"]
    assert task["order"] == 0
    project = (await client.get(f"/api/projects/{project_id}", headers=b)).json()["data"]
    assert project["status"] == "in_progress"

    resp = await client.post(
        "/api/submissions",
        data={"task_id": task["task_id"], "notes": "First delivery"},
        files={"file": ("wireframes.zip", ZIP_BYTES, "application/zip")},
        headers=s1,
    )
    assert resp.status_code == 201, resp.text
    submission = resp.json()["data"]
    assert submission["file_name"] == "wireframes.zip"
    assert submission["file_size"] == len(ZIP_BYTES)
    assert "file_path" not in submission

    task = (await client.get(f"/api/tasks/{task['task_id']}", headers=b)).json()["data"]
    assert task["status"] == "submitted"

    download = await client.get(f"/api/submissions/{submission['submission_id']}/download", headers=b)
    assert download.status_code == 200
    assert download.content == ZIP_BYTES
    assert "wireframes.zip" in download.headers["content-disposition"]

    resp = await client.patch(
        f"/api/submissions/{submission['submission_id']}/review",
        json={"status": "approved", "review_notes": "Looks good"},
        headers=b,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "approved"

    task = (await client.get(f"/api/tasks/{task['task_id']}", headers=s1)).json()["data"]
    assert task["status"] == "completed"
    project = (await client.get(f"/api/projects/{project_id}", headers=b)).json()["data"]
    assert project["status"] == "completed"

    resp = await client.patch(
        f"/api/submissions/{submission['submission_id']}/review", json={"status": "rejected"}, headers=b
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Submission has already been reviewed"


async def test_request_on_assigned_project_is_refused(client, buyer, solver, other_solver, auth_headers):
    b, s1, s2 = auth_headers(buyer), auth_headers(solver), auth_headers(other_solver)
    project_id = (await create_project(client, b))["project_id"]

    r1 = (await request_project(client, s1, project_id)).json()["data"]
    await client.patch(f"/api/requests/{r1['request_id']}/accept", headers=b)

    resp = await request_project(client, s2, project_id)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Project is not accepting requests"}


async def test_submission_without_file(client, buyer, solver, auth_headers):
    b, s1 = auth_headers(buyer), auth_headers(solver)
    project_id = (await create_project(client, b))["project_id"]
    r1 = (await request_project(client, s1, project_id)).json()["data"]
    await client.patch(f"/api/requests/{r1['request_id']}/accept", headers=b)
    task = (await client.post("/api/tasks", json={"project_id": project_id, "title": "T"}, headers=s1)).json()["data"]

    resp = await client.post("/api/submissions", data={"task_id": task["task_id"]}, headers=s1)
    assert resp.status_code == 400
    assert resp.json()["message"] == "ZIP file is required"

    resp = await client.post(
        "/api/submissions",
        data={"task_id": task["task_id"]},
        files={"file": ("notes.txt", b"plain text", "text/plain")},
        headers=s1,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Only ZIP files are allowed"


async def test_task_delete_and_solver_cannot_complete(client, buyer, solver, auth_headers):
    b, s1 = auth_headers(buyer), auth_headers(solver)
    project_id = (await create_project(client, b))["project_id"]
    r1 = (await request_project(client, s1, project_id)).json()["data"]
    await client.patch(f"/api/requests/{r1['request_id']}/accept", headers=b)
    task = (await client.post("/api/tasks", json={"project_id": project_id, "title": "T"}, headers=s1)).json()["data"]

    resp = await client.patch(f"/api/tasks/{task['task_id']}", json={"status": "completed"}, headers=s1)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Task can only be marked complete by buyer"

    resp = await client.delete(f"/api/tasks/{task['task_id']}", headers=s1)
    assert resp.json() == {"success": True, "data": None, "message": "Task deleted successfully"}
    tasks = await client.get(f"/api/tasks/project/{project_id}", headers=b)
    assert tasks.json()["data"] == []


async def test_admin_promotes_solver_to_buyer(client, admin, solver, auth_headers):
    resp = await client.patch(
        f"/api/users/{solver.user_id}/role", json={"role": "buyer"}, headers=auth_headers(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "buyer"

    resp = await client.patch(
        f"/api/users/{admin.user_id}/role", json={"role": "buyer"}, headers=auth_headers(solver)
    )
    assert resp.status_code == 403

    users = await client.get("/api/users", params={"role": "buyer"}, headers=auth_headers(admin))
    assert [u["user_id"] for u in users.json()["data"]] == [solver.user_id]

    resp = await client.patch(
        "/api/users/profile/update",
        json={"profile": {"skills": ["go"]}},
        headers=auth_headers(solver),
    )
    assert resp.json()["data"]["profile"]["skills"] == ["go"]
