"""
Tests for the activity log endpoints.
"""

from backoffice.services.permissions import full_permissions


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def activities(client, token):
    response = client.get("/activities", headers=bearer(token))
    assert response.status_code == 200
    return response.json()["activities"]


class TestListActivities:

    def test_staff_sees_only_own(self, client, admin_token, make_staff):
        staff_id, token = make_staff("sam@test.com")
        client.put("/profile", json={"name": "Sammy"}, headers=bearer(token))

        own = activities(client, token)
        assert [a["action"] for a in own] == ["update_profile"]
        assert all(a["userId"] == staff_id for a in own)

    def test_admin_sees_everything_newest_first(self, client, admin_token, make_staff):
        _, token = make_staff("sam@test.com")
        client.put("/profile", json={"name": "Sammy"}, headers=bearer(token))

        actions = [a["action"] for a in activities(client, admin_token)]
        assert actions == ["update_profile", "add_staff", "signup"]

    def test_ip_address_recorded(self, client, admin_token):
        client.put("/profile", json={"name": "Al"}, headers={
            **bearer(admin_token), "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
        })
        assert activities(client, admin_token)[0]["ipAddress"] == "203.0.113.7"


class TestDeleteActivities:

    def test_super_admin_deletes_one(self, client, admin_token):
        target = activities(client, admin_token)[0]
        response = client.delete(f"/activities/{target['id']}", headers=bearer(admin_token))
        assert response.status_code == 200

        remaining = activities(client, admin_token)
        assert target["id"] not in [a["id"] for a in remaining]
        assert remaining[0]["action"] == "delete_activity"

    def test_admin_cannot_delete(self, client, make_staff):
        _, token = make_staff("adm@test.com", role="Admin", permissions=full_permissions())
        target = activities(client, token)
        response = client.delete("/activities/anything", headers=bearer(token))
        assert response.status_code == 403
        assert response.json() == {"error": "Only Super Admin can delete activity logs"}
        assert activities(client, token) == target

    def test_bulk_delete(self, client, admin_token, make_staff):
        make_staff("sam@test.com")
        ids = [a["id"] for a in activities(client, admin_token)]

        response = client.post("/activities/bulk-delete", json={"activityIds": ids},
                               headers=bearer(admin_token))
        assert response.status_code == 200
        assert response.json()["deletedCount"] == 2

        remaining = activities(client, admin_token)
        assert [a["action"] for a in remaining] == ["bulk_delete_activities"]

    def test_bulk_delete_needs_ids(self, client, admin_token):
        response = client.post("/activities/bulk-delete", json={"activityIds": []},
                               headers=bearer(admin_token))
        assert response.status_code == 400
        assert response.json() == {"error": "Activity IDs array is required"}
