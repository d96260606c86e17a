import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from models import SubscriptionBundle
from routers.deps import get_chat_service
from utils.time import utcnow


@pytest.fixture
def user(client):
    response = client.post("/api/users", json={"email": "Ada@Example.com"})
    assert response.status_code == 201
    return response.json()


class TestUsers:
    def test_create_user(self, user):
        assert user["email"] == "ada@example.com"
        assert user["id"]
        assert "createdAt" in user

    def test_duplicate_email(self, client, user):
        response = client.post("/api/users", json={"email": "ada@example.com"})

        assert response.status_code == 400
        assert response.json()["error"]["statusCode"] == 400

    def test_invalid_email(self, client):
        response = client.post("/api/users", json={"email": "not-an-email"})

        assert response.status_code == 400
        assert "email" in response.json()["error"]["message"]

    def test_get_user(self, client, user):
        assert client.get(f"/api/users/{user['id']}").json()["email"] == user["email"]

    def test_unknown_user(self, client):
        response = client.get("/api/users/missing")

        assert response.status_code == 404
        assert response.json() == {"error": {"message": "User not found", "statusCode": 404}}


class TestChat:
    def test_send_message(self, client, user):
        response = client.post(f"/api/chat/users/{user['id']}/messages", json={"question": "Hi there"})

        assert response.status_code == 201
        body = response.json()
        assert body["userId"] == user["id"]
        assert body["question"] == "Hi there"
        assert body["tokens"] > 0
        assert "createdAt" in body

    def test_blank_question(self, client, user):
        response = client.post(f"/api/chat/users/{user['id']}/messages", json={"question": "   "})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Question is required and must be a non-empty string"

    def test_missing_question(self, client, user):
        response = client.post(f"/api/chat/users/{user['id']}/messages", json={})

        assert response.status_code == 400

    def test_unknown_user(self, client):
        response = client.post("/api/chat/users/missing/messages", json={"question": "Hello"})

        assert response.status_code == 404

    def test_quota_exhausted(self, client, user):
        for i in range(3):
            assert client.post(f"/api/chat/users/{user['id']}/messages", json={"question": f"Q{i}"}).status_code == 201

        response = client.post(f"/api/chat/users/{user['id']}/messages", json={"question": "Q4"})

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Valid subscription required. Free quota exhausted."

    def test_bundle_allows_more_messages(self, client, user):
        client.post(f"/api/subscriptions/users/{user['id']}/subscriptions",
                    json={"tier": "Basic", "billingCycle": "monthly"})
        for i in range(4):
            response = client.post(f"/api/chat/users/{user['id']}/messages", json={"question": f"Q{i}"})
            assert response.status_code == 201

        subscriptions = client.get(f"/api/subscriptions/users/{user['id']}/subscriptions").json()["subscriptions"]
        free, bundle = subscriptions
        assert free["remainingMessages"] == 0
        assert bundle["remainingMessages"] == 9

    def test_history(self, client, user):
        for i in range(3):
            client.post(f"/api/chat/users/{user['id']}/messages", json={"question": f"Q{i}"})

        response = client.get(f"/api/chat/users/{user['id']}/messages", params={"limit": 2})

        assert response.status_code == 200
        assert len(response.json()["messages"]) == 2

    @pytest.mark.parametrize("limit", [0, 101])
    def test_history_limit_bounds(self, client, user, limit):
        response = client.get(f"/api/chat/users/{user['id']}/messages", params={"limit": limit})

        assert response.status_code == 400

    def test_get_message(self, client, user):
        created = client.post(f"/api/chat/users/{user['id']}/messages", json={"question": "Hello"}).json()

        assert client.get(f"/api/chat/messages/{created['id']}").json()["id"] == created["id"]
        assert client.get("/api/chat/messages/missing").status_code == 404


class TestSubscriptions:
    def _create(self, client, user_id, **payload):
        body = {"tier": "Pro", "billingCycle": "yearly", "autoRenew": False}
        body.update(payload)
        return client.post(f"/api/subscriptions/users/{user_id}/subscriptions", json=body)

    def test_create(self, client, user):
        response = self._create(client, user["id"])

        assert response.status_code == 201
        body = response.json()
        assert body["kind"] == "bundle"
        assert body["tier"] == "Pro"
        assert body["billingCycle"] == "yearly"
        assert body["price"] == pytest.approx(299.90)
        assert body["maxMessages"] == 100
        assert body["renewalDate"] is None

    def test_invalid_tier(self, client, user):
        response = self._create(client, user["id"], tier="Gold")

        assert response.status_code == 400

    @pytest.mark.parametrize("auto_renew", ["yes", 1, "true"])
    def test_auto_renew_must_be_a_boolean(self, client, user, auto_renew):
        response = self._create(client, user["id"], autoRenew=auto_renew)

        assert response.status_code == 400

    def test_unknown_user(self, client):
        assert self._create(client, "missing").status_code == 404

    def test_list_starts_with_free_quota(self, client, user):
        self._create(client, user["id"])
        now = utcnow()

        response = client.get(f"/api/subscriptions/users/{user['id']}/subscriptions")

        assert response.status_code == 200
        free, bundle = response.json()["subscriptions"]
        assert free["kind"] == "free"
        assert free["id"] == f"free-{now.year}-{now.month}"
        assert free["tier"] == "Free"
        assert free["maxMessages"] == 3
        assert free["remainingMessages"] == 3
        assert free["price"] == 0
        assert bundle["kind"] == "bundle"

    def test_active_list_excludes_inactive(self, client, user, test_db):
        created = self._create(client, user["id"]).json()
        self._create(client, user["id"], tier="Basic", billingCycle="monthly")
        test_db.get(SubscriptionBundle, created["id"]).is_active = False
        test_db.commit()

        entries = client.get(f"/api/subscriptions/users/{user['id']}/subscriptions/active").json()["subscriptions"]

        assert [e["kind"] for e in entries] == ["free", "bundle"]
        assert entries[1]["tier"] == "Basic"

    def test_get_subscription(self, client, user):
        created = self._create(client, user["id"]).json()

        assert client.get(f"/api/subscriptions/{created['id']}").json()["id"] == created["id"]
        assert client.get("/api/subscriptions/missing").status_code == 404

    def test_cancel(self, client, user):
        created = self._create(client, user["id"], autoRenew=True).json()
        assert created["renewalDate"] is not None

        response = client.patch(f"/api/subscriptions/{created['id']}/cancel")

        assert response.status_code == 200
        body = response.json()
        assert body["autoRenew"] is False
        assert body["renewalDate"] is None
        assert body["isActive"] is True
        assert "remain active" in body["message"]

    def test_toggle_auto_renew(self, client, user):
        created = self._create(client, user["id"]).json()

        response = client.patch(f"/api/subscriptions/{created['id']}/auto-renew", json={"autoRenew": True})

        assert response.status_code == 200
        assert response.json()["autoRenew"] is True
        assert response.json()["renewalDate"] == response.json()["endDate"]

    def test_toggle_auto_renew_requires_boolean(self, client, user):
        created = self._create(client, user["id"]).json()

        response = client.patch(f"/api/subscriptions/{created['id']}/auto-renew", json={"autoRenew": "yes"})

        assert response.status_code == 400


class TestDevRoutes:
    def test_force_renewal(self, dev_client, client, user):
        created = client.post(f"/api/subscriptions/users/{user['id']}/subscriptions",
                              json={"tier": "Basic", "billingCycle": "monthly", "autoRenew": True}).json()

        moved = dev_client.patch(f"/api/test/subscriptions/{created['id']}/set-renewal-past", params={"days": 2})
        assert moved.status_code == 200

        details = dev_client.get(f"/api/test/subscriptions/{created['id']}/details").json()
        assert details["dueForRenewal"] is True

        report = dev_client.post("/api/test/renewals/process").json()["report"]
        assert report["renewed"] == 1

        active = client.get(f"/api/subscriptions/users/{user['id']}/subscriptions/active").json()["subscriptions"]
        assert len(active) == 2
        assert active[1]["id"] != created["id"]

    def test_unknown_subscription(self, dev_client):
        response = dev_client.get("/api/test/subscriptions/missing/details")

        assert response.status_code == 404

    def test_usage_reset(self, dev_client):
        response = dev_client.post("/api/test/usage/reset")

        assert response.status_code == 200
        assert response.json()["message"] == "Monthly usage reset checked"
        assert response.json()["usersReset"] >= 0


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_database_down(self, client):
        class BrokenSession:
            def execute(self, *args, **kwargs):
                raise RuntimeError("connection refused")

        app.dependency_overrides[get_db] = lambda: BrokenSession()

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestUnexpectedErrors:
    def test_internal_details_are_not_exposed(self, client, user, caplog):
        class BrokenChatService:
            def send_message(self, user_id, question):
                raise RuntimeError("secret connection string")

        app.dependency_overrides[get_chat_service] = lambda: BrokenChatService()
        unsafe_client = TestClient(app, raise_server_exceptions=False)

        response = unsafe_client.post(f"/api/chat/users/{user['id']}/messages", json={"question": "Hello"})

        assert response.status_code == 500
        assert response.json() == {"error": {"message": "Internal server error", "statusCode": 500}}
        assert "secret" not in response.text
        assert any("Unhandled error" in record.getMessage() for record in caplog.records)
