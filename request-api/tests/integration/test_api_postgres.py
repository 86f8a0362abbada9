from sqlalchemy import inspect


def test_migration_creates_requests_table(pg_database):
    inspector = inspect(pg_database.engine)
    columns = {column["name"] for column in inspector.get_columns("requests")}
    assert columns == {
        "id",
        "name",
        "email",
        "emp_id",
        "program",
        "program_time",
        "request_date",
        "status",
        "loan_type",
        "amount",
        "reason",
        "document_path",
    }
    indexes = {index["name"] for index in inspector.get_indexes("requests")}
    assert {"idx_requests_emp_id_program", "idx_requests_request_date"} <= indexes


def test_create_and_review_request(pg_client, helpers):
    created = pg_client.post(
        "/api/requests", data=helpers.request_form(amount="1500.50", status="Approved")
    )
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "Pending"
    assert body["amount"] == "1500.50"

    updated = pg_client.put(f"/api/requests/{body['id']}", json={"status": "Approved"})
    assert updated.status_code == 200
    assert pg_client.get(f"/api/requests/{body['id']}").json()["status"] == "Approved"


def test_duplicate_guard(pg_client, helpers):
    form = helpers.request_form(program="Yoga and Meditation")
    first = pg_client.post("/api/requests", data=form)
    assert first.status_code == 201
    assert pg_client.post("/api/requests", data=form).status_code == 400

    pg_client.put(f"/api/requests/{first.json()['id']}", json={"status": "Rejected"})
    assert pg_client.post("/api/requests", data=form).status_code == 201


def test_read_requests_ordered_by_date_descending(pg_client, helpers):
    for date in ["2025-01-15", "2025-03-01", "2024-12-24"]:
        pg_client.post("/api/requests", data=helpers.request_form(date=date))

    response = pg_client.get("/api/requests")
    assert [item["request_date"] for item in response.json()] == [
        "2025-03-01",
        "2025-01-15",
        "2024-12-24",
    ]


def test_read_unknown_request(pg_client):
    assert pg_client.get("/api/requests/0").status_code == 404
    assert pg_client.put("/api/requests/0", json={"status": "Approved"}).status_code == 404
