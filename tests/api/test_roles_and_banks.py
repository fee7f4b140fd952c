"""
Tests for role and bank endpoints.
"""


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestRoles:

    def test_create_and_list(self, client, admin_token):
        response = client.post("/roles", json={"roleName": "Cashier"}, headers=bearer(admin_token))
        assert response.status_code == 200
        role = response.json()["role"]
        assert role["tier"] == "staff"

        roles = client.get("/roles", headers=bearer(admin_token)).json()["roles"]
        assert [r["name"] for r in roles] == ["Cashier"]

    def test_explicit_tier(self, client, admin_token):
        response = client.post("/roles", json={"roleName": "Branch Manager", "tier": "admin"},
                               headers=bearer(admin_token))
        assert response.json()["role"]["tier"] == "admin"

    def test_invalid_tier(self, client, admin_token):
        response = client.post("/roles", json={"roleName": "X", "tier": "root"},
                               headers=bearer(admin_token))
        assert response.status_code == 400

    def test_rename_moves_accounts(self, client, admin_token, make_staff):
        role = client.post("/roles", json={"roleName": "Cashier"},
                           headers=bearer(admin_token)).json()["role"]
        _, token = make_staff("sam@test.com", role="Cashier")

        response = client.put(f"/roles/{role['id']}", json={"roleName": "Teller"},
                              headers=bearer(admin_token))
        assert response.status_code == 200

        user = client.get("/user", headers=bearer(token)).json()["user"]
        assert user["role"] == "Teller"

    def test_delete_assigned_role_conflicts(self, client, admin_token, make_staff):
        role = client.post("/roles", json={"roleName": "Cashier"},
                           headers=bearer(admin_token)).json()["role"]
        staff_id, _ = make_staff("sam@test.com", role="Cashier")

        response = client.delete(f"/roles/{role['id']}", headers=bearer(admin_token))
        assert response.status_code == 409
        assert response.json() == {"error": "Cannot delete role that is assigned to staff members"}

        client.put(f"/staff/{staff_id}", json={"role": "Teller"}, headers=bearer(admin_token))
        response = client.delete(f"/roles/{role['id']}", headers=bearer(admin_token))
        assert response.status_code == 200
        assert client.get("/roles", headers=bearer(admin_token)).json()["roles"] == []

    def test_delete_unused_role(self, client, admin_token):
        role = client.post("/roles", json={"roleName": "Cashier"},
                           headers=bearer(admin_token)).json()["role"]
        response = client.delete(f"/roles/{role['id']}", headers=bearer(admin_token))
        assert response.status_code == 200
        assert client.get("/roles", headers=bearer(admin_token)).json()["roles"] == []

    def test_needs_staff_management_grant(self, client, make_staff):
        _, token = make_staff("sam@test.com")
        assert client.get("/roles", headers=bearer(token)).status_code == 403


class TestBanks:

    def test_staff_with_grant_can_add(self, client, make_staff):
        _, token = make_staff(
            "sam@test.com", permissions={"bankDeposits": {"view": True, "add": True}},
        )
        response = client.post("/banks", json={"bankName": "First Bank"}, headers=bearer(token))
        assert response.status_code == 200
        banks = client.get("/banks", headers=bearer(token)).json()["banks"]
        assert [b["name"] for b in banks] == ["First Bank"]

    def test_non_admin_cannot_edit_even_with_grant(self, client, admin_token, make_staff):
        bank = client.post("/banks", json={"bankName": "First Bank"},
                           headers=bearer(admin_token)).json()["bank"]
        _, token = make_staff(
            "sam@test.com",
            permissions={"bankDeposits": {"view": True, "edit": True, "delete": True}},
        )
        response = client.put(f"/banks/{bank['id']}", json={"bankName": "Renamed"},
                              headers=bearer(token))
        assert response.status_code == 403
        assert response.json() == {"error": "No permission to edit banks"}

    def test_delete_bank_in_use_conflicts(self, client, admin_token):
        bank = client.post("/banks", json={"bankName": "First Bank"},
                           headers=bearer(admin_token)).json()["bank"]
        record = client.post("/bank-deposits", json={"bankId": bank["id"], "amount": 5},
                             headers=bearer(admin_token)).json()["bankDeposit"]

        response = client.delete(f"/banks/{bank['id']}", headers=bearer(admin_token))
        assert response.status_code == 409

        client.delete(f"/bank-deposits/{record['id']}", headers=bearer(admin_token))
        response = client.delete(f"/banks/{bank['id']}", headers=bearer(admin_token))
        assert response.status_code == 200
        assert client.get("/banks", headers=bearer(admin_token)).json()["banks"] == []

    def test_admin_renames_and_deletes(self, client, admin_token):
        bank = client.post("/banks", json={"bankName": "First Bank"},
                           headers=bearer(admin_token)).json()["bank"]
        renamed = client.put(f"/banks/{bank['id']}", json={"bankName": "Second Bank"},
                             headers=bearer(admin_token))
        assert renamed.json()["bank"]["name"] == "Second Bank"

        assert client.delete(f"/banks/{bank['id']}", headers=bearer(admin_token)).status_code == 200
        assert client.get("/banks", headers=bearer(admin_token)).json()["banks"] == []
