from datetime import timedelta

from conftest import PASSWORD
from pos_api.core.jwt import create_access_token, decode_access_token
from pos_api.models import UserRole


class TestTokens:
    def test_round_trip_claims(self):
        token = create_access_token("u1", "a@shop.com", "CASHIER")

        payload = decode_access_token(token)

        assert payload["sub"] == "u1"
        assert payload["email"] == "a@shop.com"
        assert payload["role"] == "CASHIER"
        assert payload["type"] == "access"

    def test_expired_token_is_rejected(self):
        token = create_access_token("u1", "a@shop.com", "CASHIER", expires_delta=timedelta(seconds=-1))

        assert decode_access_token(token) is None

    def test_garbage_token_is_rejected(self):
        assert decode_access_token("not-a-jwt") is None


class TestLogin:
    def test_login_sets_cookie_that_authenticates(self, client, cashier):
        response = client.post("/auth/login", json={"email": cashier.email, "password": PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["user"]["role"] == "CASHIER"
        assert "token" in response.cookies

        # TestClient keeps the cookie for the next request
        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == cashier.email

    def test_login_token_works_as_bearer_header(self, client, cashier):
        token = client.post(
            "/auth/login",
            json={"email": cashier.email, "password": PASSWORD},
        ).json()["access_token"]
        client.cookies.clear()

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_wrong_password_is_unauthorized(self, client, cashier):
        response = client.post("/auth/login", json={"email": cashier.email, "password": "wrong-password"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unknown_email_is_unauthorized(self, client):
        response = client.post("/auth/login", json={"email": "ghost@shop.com", "password": PASSWORD})

        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, cashier):
        client.post("/auth/login", json={"email": cashier.email, "password": PASSWORD})

        response = client.post("/auth/logout")

        assert response.status_code == 200
        assert client.get("/auth/me").status_code == 401


class TestCurrentUser:
    def test_missing_credentials(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_token_for_deleted_user(self, client, db):
        token = create_access_token("gone", "gone@shop.com", "CASHIER")

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "User not found"

    def test_role_comes_from_database(self, db, cashier, client):
        # Token claims ADMIN but the stored role wins
        token = create_access_token(cashier.id, cashier.email, UserRole.ADMIN.value)

        response = client.get("/users", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403


class TestUsers:
    def test_admin_creates_cashier(self, admin_client, client):
        response = admin_client.post(
            "/users",
            json={"email": "new@shop.com", "password": "s3cure-enough", "name": "New"},
        )

        assert response.status_code == 201
        assert response.json()["role"] == "CASHIER"

        login = client.post("/auth/login", json={"email": "new@shop.com", "password": "s3cure-enough"})
        assert login.status_code == 200

    def test_duplicate_email_conflicts(self, admin_client, cashier):
        response = admin_client.post(
            "/users",
            json={"email": cashier.email, "password": "s3cure-enough"},
        )

        assert response.status_code == 409

    def test_common_password_rejected(self, admin_client):
        response = admin_client.post(
            "/users",
            json={"email": "weak@shop.com", "password": "password123"},
        )

        assert response.status_code == 400

    def test_cashier_cannot_manage_users(self, cashier_client):
        assert cashier_client.get("/users").status_code == 403

    def test_admin_lists_users(self, admin_client, cashier):
        emails = {user["email"] for user in admin_client.get("/users").json()}

        assert emails == {"admin@shop.com", cashier.email}


class TestUserManagement:
    def test_admin_gets_single_user(self, admin_client, cashier):
        response = admin_client.get(f"/users/{cashier.id}")

        assert response.status_code == 200
        assert response.json()["email"] == cashier.email

    def test_unknown_user_is_not_found(self, admin_client):
        assert admin_client.get("/users/nobody").status_code == 404

    def test_admin_promotes_and_renames(self, admin_client, cashier):
        response = admin_client.put(
            f"/users/{cashier.id}",
            json={"role": "ADMIN", "name": "Head Cashier"},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "ADMIN"
        assert response.json()["name"] == "Head Cashier"

    def test_admin_sets_new_password(self, admin_client, client, cashier):
        admin_client.put(f"/users/{cashier.id}", json={"password": "brand-new-secret"})

        old = client.post("/auth/login", json={"email": cashier.email, "password": PASSWORD})
        new = client.post("/auth/login", json={"email": cashier.email, "password": "brand-new-secret"})

        assert old.status_code == 401
        assert new.status_code == 200

    def test_update_to_taken_email_conflicts(self, admin_client, admin, cashier):
        response = admin_client.put(f"/users/{cashier.id}", json={"email": admin.email})

        assert response.status_code == 409

    def test_admin_cannot_demote_self(self, admin_client, admin):
        response = admin_client.put(f"/users/{admin.id}", json={"role": "CASHIER"})

        assert response.status_code == 400

    def test_delete_user_without_records(self, admin_client, cashier):
        response = admin_client.delete(f"/users/{cashier.id}")

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}
        assert admin_client.get(f"/users/{cashier.id}").status_code == 404

    def test_delete_user_with_sales_is_rejected(self, admin_client, cashier_client, cashier, make_product):
        product = make_product()
        cashier_client.post(
            "/sales",
            json={"items": [{"product_id": product.id, "quantity": 1, "price": 10}]},
        )

        assert admin_client.delete(f"/users/{cashier.id}").status_code == 400

    def test_admin_cannot_delete_self(self, admin_client, admin):
        assert admin_client.delete(f"/users/{admin.id}").status_code == 400

    def test_cashier_cannot_manage_single_user(self, cashier_client, cashier):
        assert cashier_client.get(f"/users/{cashier.id}").status_code == 403
        assert cashier_client.delete(f"/users/{cashier.id}").status_code == 403


class TestPasswordReset:
    def test_user_resets_own_password(self, cashier_client, client, cashier):
        response = cashier_client.post(
            f"/users/{cashier.id}/reset-password",
            json={"new_password": "another-long-secret"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Password reset successful"
        assert response.json()["user"]["id"] == cashier.id

        login = client.post(
            "/auth/login",
            json={"email": cashier.email, "password": "another-long-secret"},
        )
        assert login.status_code == 200

    def test_cannot_reset_someone_else(self, admin_client, cashier):
        response = admin_client.post(
            f"/users/{cashier.id}/reset-password",
            json={"new_password": "another-long-secret"},
        )

        assert response.status_code == 403

    def test_short_password_is_a_field_error(self, cashier_client, cashier):
        response = cashier_client.post(
            f"/users/{cashier.id}/reset-password",
            json={"new_password": "short"},
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "new_password"

    def test_common_password_rejected(self, cashier_client, cashier):
        response = cashier_client.post(
            f"/users/{cashier.id}/reset-password",
            json={"new_password": "password123"},
        )

        assert response.status_code == 400
