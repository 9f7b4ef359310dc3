from decimal import Decimal


def create_stall(client, code="A-001", size="MEDIUM", location="Hall A", price="500.00"):
    response = client.post(
        "/api/stalls",
        json={"code": code, "size": size, "location": location, "price": price},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_routes_are_mounted_under_api_prefix(client):
    response = client.get("/api/health")
    assert response.status_code == 200

    assert client.get("/stalls").status_code == 404
    assert client.get("/api/stalls").status_code == 200


def test_stall_lifecycle_flow(client):
    stall = create_stall(client)
    stall_id = stall["id"]
    assert stall["status"] == "AVAILABLE"
    assert Decimal(stall["price"]) == Decimal("500.00")

    hold_response = client.post(f"/api/stalls/{stall_id}/hold")
    assert hold_response.status_code == 200
    assert hold_response.json()["status"] == "HELD"

    # Retrying the hold is safe.
    retry_response = client.post(f"/api/stalls/{stall_id}/hold")
    assert retry_response.status_code == 200
    assert retry_response.json()["status"] == "HELD"

    reserve_response = client.post(f"/api/stalls/{stall_id}/reserve")
    assert reserve_response.status_code == 200
    assert reserve_response.json()["status"] == "RESERVED"

    release_response = client.post(f"/api/stalls/{stall_id}/release")
    assert release_response.status_code == 200
    assert release_response.json()["status"] == "AVAILABLE"

    fetched = client.get(f"/api/stalls/{stall_id}").json()
    assert fetched["status"] == "AVAILABLE"
    assert fetched["code"] == "A-001"


def test_transition_events_land_in_outbox_once(client):
    stall_id = create_stall(client)["id"]

    client.post(f"/api/stalls/{stall_id}/hold")
    client.post(f"/api/stalls/{stall_id}/reserve")
    client.post(f"/api/stalls/{stall_id}/reserve")
    client.post(f"/api/stalls/{stall_id}/release")
    client.post(f"/api/stalls/{stall_id}/release")

    events = client.get("/api/outbox/events").json()
    event_types = sorted(event["event_type"] for event in events)
    assert event_types == ["stall.released", "stall.reserved"]
    assert all(event["aggregate_id"] == str(stall_id) for event in events)

    published = client.post(f"/api/outbox/events/{events[0]['id']}/mark-published")
    assert published.status_code == 200
    assert published.json()["status"] == "PUBLISHED"
    assert len(client.get("/api/outbox/events").json()) == 1


def test_invalid_transitions_conflict(client):
    stall_id = create_stall(client)["id"]

    reserve_response = client.post(f"/api/stalls/{stall_id}/reserve")
    assert reserve_response.status_code == 409
    assert "AVAILABLE" in reserve_response.json()["detail"]

    client.post(f"/api/stalls/{stall_id}/hold")
    client.post(f"/api/stalls/{stall_id}/reserve")

    hold_response = client.post(f"/api/stalls/{stall_id}/hold")
    assert hold_response.status_code == 409
    assert "RESERVED" in hold_response.json()["detail"]


def test_duplicate_code_conflict(client):
    create_stall(client)

    response = client.post(
        "/api/stalls",
        json={"code": "A-001", "size": "LARGE", "location": "Hall B", "price": "750.00"},
    )

    assert response.status_code == 409
    assert "A-001" in response.json()["detail"]


def test_unknown_stall_not_found(client):
    response = client.get("/api/stalls/999")

    assert response.status_code == 404
    assert "999" in response.json()["detail"]

    assert client.post("/api/stalls/999/hold").status_code == 404


def test_update_stall_partial(client):
    stall = create_stall(client)

    response = client.put(f"/api/stalls/{stall['id']}", json={"location": "Hall C"})

    assert response.status_code == 200
    body = response.json()
    assert body["location"] == "Hall C"
    assert body["code"] == "A-001"
    assert body["size"] == "MEDIUM"
    assert body["status"] == "AVAILABLE"
    assert Decimal(body["price"]) == Decimal("500.00")


def test_create_rejects_invalid_payload(client):
    negative = client.post(
        "/api/stalls",
        json={"code": "A-009", "size": "SMALL", "location": "Hall A", "price": "-1"},
    )
    assert negative.status_code == 422

    blank = client.post(
        "/api/stalls",
        json={"code": "   ", "size": "SMALL", "location": "Hall A", "price": "10"},
    )
    assert blank.status_code == 422

    unknown_size = client.post(
        "/api/stalls",
        json={"code": "A-010", "size": "HUGE", "location": "Hall A", "price": "10"},
    )
    assert unknown_size.status_code == 422


def test_list_stalls_filters_and_pages(client):
    create_stall(client, code="A-001", size="SMALL", location="Hall A, Aisle 1")
    create_stall(client, code="A-002", size="MEDIUM", location="hall a, Aisle 2")
    b = create_stall(client, code="B-001", size="LARGE", location="Hall B")
    client.post(f"/api/stalls/{b['id']}/hold")

    by_location = client.get("/api/stalls", params={"location": "HALL A"}).json()
    assert [item["code"] for item in by_location["content"]] == ["A-001", "A-002"]
    assert by_location["total_elements"] == 2

    held = client.get("/api/stalls", params={"status": "HELD"}).json()
    assert [item["code"] for item in held["content"]] == ["B-001"]

    large = client.get("/api/stalls", params={"size": "LARGE"}).json()
    assert large["total_elements"] == 1

    paged = client.get("/api/stalls", params={"page": 1, "page_size": 2}).json()
    assert paged["total_pages"] == 2
    assert [item["code"] for item in paged["content"]] == ["B-001"]

    bad_sort = client.get("/api/stalls", params={"sort": "version"})
    assert bad_sort.status_code == 422
