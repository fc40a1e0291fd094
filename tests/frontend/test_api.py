"""
Tests for the JSON API.
"""

from bson import ObjectId


class TestJobsApi:
    """Tests for the public jobs endpoint."""

    def test_active_jobs(self, client, fake_db, sample_job):
        fake_db["jobs"].insert_one(sample_job)
        fake_db["jobs"].insert_one(dict(sample_job, _id=ObjectId(), active=False))

        data = client.get("/api/jobs").get_json()

        assert data["total"] == 1
        assert data["jobs"][0]["id"] == str(sample_job["_id"])
        assert data["jobs"][0]["created_at"].startswith("2026-01-10")

    def test_filters(self, client, fake_db, sample_job):
        fake_db["jobs"].insert_one(sample_job)
        fake_db["jobs"].insert_one(dict(sample_job, _id=ObjectId(), title="Stocker", department="Warehouse"))

        assert client.get("/api/jobs?q=stock").get_json()["total"] == 1
        assert client.get("/api/jobs?department=Front+End").get_json()["jobs"][0]["title"] == "Cashier"


class TestApplicationsApi:
    """Tests for the authenticated application endpoints."""

    def test_requires_authentication(self, client, fake_db):
        response = client.get("/api/applications")

        assert response.status_code == 401
        assert response.get_json() == {"error": "Not authenticated"}

    def test_list_and_search(self, authenticated_client, fake_db, sample_application):
        fake_db["applications"].insert_one(sample_application)
        fake_db["applications"].insert_one(dict(sample_application, _id=ObjectId(), city="Decatur"))

        data = authenticated_client.get("/api/applications?field=city&q=DECA").get_json()

        assert data["total"] == 1
        assert data["applications"][0]["city"] == "Decatur"

    def test_invalid_search_field(self, authenticated_client, fake_db):
        response = authenticated_client.get("/api/applications?field=password&q=x")
        assert response.status_code == 400

    def test_get_normalizes_legacy_row(self, authenticated_client, fake_db):
        result = fake_db["applications"].insert_one({
            "first_name": "Old", "high_school": "Central High", "references": "Bob", "computer_skills": None,
        })

        data = authenticated_client.get(f"/api/applications/{result.inserted_id}").get_json()

        assert data["high_school"]["name"] == "Central High"
        assert data["references"][0]["name"] == "Bob"
        assert data["computer_skills"] == []
        assert data["status"] == "pending"

    def test_get_malformed_and_unknown(self, authenticated_client, fake_db):
        assert authenticated_client.get("/api/applications/nope").status_code == 400
        assert authenticated_client.get(f"/api/applications/{ObjectId()}").status_code == 404


class TestStatusApi:
    """Tests for recording review decisions."""

    def test_reject(self, authenticated_client, fake_db, sample_application):
        fake_db["applications"].insert_one(sample_application)

        response = authenticated_client.post(
            f"/api/applications/{sample_application['_id']}/status", json={"status": "rejected"}
        )

        assert response.status_code == 200
        assert response.get_json()["status_by"] == "alice"
        assert fake_db["applications"].rows[0]["status"] == "rejected"

    def test_invalid_status(self, authenticated_client, fake_db, sample_application):
        fake_db["applications"].insert_one(sample_application)

        response = authenticated_client.post(
            f"/api/applications/{sample_application['_id']}/status", json={"status": "archived"}
        )

        assert response.status_code == 400
        assert "Invalid status" in response.get_json()["error"]

    def test_unknown_application(self, authenticated_client, fake_db):
        response = authenticated_client.post(f"/api/applications/{ObjectId()}/status", json={"status": "approved"})
        assert response.status_code == 404


class TestStatsApi:
    def test_counts(self, authenticated_client, fake_db, sample_job, sample_application):
        fake_db["jobs"].insert_one(sample_job)
        fake_db["applications"].insert_one(sample_application)

        data = authenticated_client.get("/api/stats").get_json()

        assert data == {"applications": 1, "active_jobs": 1, "users": 0}

    def test_unknown_api_route_is_json(self, client, fake_db):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found"}
