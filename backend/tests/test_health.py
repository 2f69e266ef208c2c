def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["database"]["ok"] is True
    assert payload["database"]["schema_ok"] is True
    assert payload["database"]["missing_tables"] == []
    assert payload["scheduling"] == {"active_semester": None, "upcoming_semesters": 0, "pending_sessions": 0}


def test_readiness_reports_active_semester(client):
    semesters = []
    for code, start, end in (("2026S", "2026-01-05", "2026-03-15"), ("2026F", "2026-09-07", "2026-12-13")):
        response = client.post(
            "/api/semesters/",
            json={"code": code, "name": code, "start_date": start, "end_date": end},
        )
        assert response.status_code == 201, response.text
        semesters.append(response.json())

    assert client.get("/api/health/ready").json()["scheduling"]["upcoming_semesters"] == 2

    activated = client.post(f"/api/semesters/{semesters[0]['id']}/activate")
    assert activated.status_code == 200

    scheduling = client.get("/api/health/ready").json()["scheduling"]
    assert scheduling == {"active_semester": "2026S", "upcoming_semesters": 1, "pending_sessions": 0}
