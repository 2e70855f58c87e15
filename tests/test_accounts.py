"""Tests for customer and back-office accounts."""

from datetime import timedelta

import pytest

from brandstore.accounts.admins import AdminAccounts
from brandstore.accounts.customers import CustomerAccounts
from brandstore.auth.passwords import verify_password
from brandstore.auth.tokens import TokenIssuer
from brandstore.core.errors import DuplicateKey, NotFound, Unauthorized, ValidationFailed

from conftest import run, stored_upload

CUSTOMER = {
    "full_name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9876543210",
    "password": "s3cret-pass",
}


@pytest.fixture
def tokens():
    return TokenIssuer("accounts-secret")


@pytest.fixture
def customers(lifecycle, tokens):
    return CustomerAccounts(lifecycle, tokens)


@pytest.fixture
def admins(store, tokens):
    return AdminAccounts(store, tokens)


class TestCustomerRegistration:
    def test_password_is_hashed(self, customers, store):
        result = run(customers.register(CUSTOMER))
        row = store.query_one("SELECT * FROM customers WHERE id = :id", {"id": result.id})
        assert row["password_hash"] != CUSTOMER["password"]
        assert verify_password(CUSTOMER["password"], row["password_hash"])
        assert row["profile_url"] is None

    def test_profile_picture_is_optional(self, customers, objects, store):
        upload = stored_upload(objects, "profile")
        result = run(customers.register(CUSTOMER, [upload]))
        assert result.references["profile_url"] == upload.url

    def test_missing_password(self, customers, objects):
        upload = stored_upload(objects, "profile")
        with pytest.raises(ValidationFailed) as exc:
            run(customers.register({**CUSTOMER, "password": "  "}, [upload]))
        assert "Password" in exc.value.message
        assert objects.deleted == [upload.key]

    def test_duplicate_email_is_conflict(self, customers, objects):
        run(customers.register(CUSTOMER))
        upload = stored_upload(objects, "profile")
        with pytest.raises(DuplicateKey) as exc:
            run(customers.register({**CUSTOMER, "phone": "1111111111", "email": "ASHA@example.com"}, [upload]))
        assert exc.value.status_code == 409
        assert exc.value.field == "email"
        assert objects.deleted == [upload.key]

    def test_duplicate_phone_is_conflict(self, customers):
        run(customers.register(CUSTOMER))
        with pytest.raises(DuplicateKey) as exc:
            run(customers.register({**CUSTOMER, "email": "other@example.com"}))
        assert exc.value.field == "phone"


class TestCustomerLogin:
    def test_login_returns_token_and_profile(self, customers, tokens):
        created = run(customers.register(CUSTOMER))
        session = customers.login("asha@example.com", CUSTOMER["password"])

        identity = tokens.verify(session["token"])
        assert identity.user_id == created.id
        assert identity.role == "customer"
        assert session["user"]["email"] == CUSTOMER["email"]
        assert "password_hash" not in session["user"]

    def test_wrong_password(self, customers):
        run(customers.register(CUSTOMER))
        with pytest.raises(Unauthorized) as exc:
            customers.login(CUSTOMER["email"], "wrong")
        assert exc.value.message == "Invalid credentials"

    def test_unknown_email(self, customers):
        with pytest.raises(Unauthorized):
            customers.login("nobody@example.com", "x")

    def test_missing_credentials(self, customers):
        with pytest.raises(ValidationFailed):
            customers.login("", "")


class TestCustomerProfile:
    def test_get_profile_hides_hash(self, customers):
        created = run(customers.register(CUSTOMER))
        profile = customers.get_profile(created.id)
        assert profile["full_name"] == "Asha Rao"
        assert "password_hash" not in profile

    def test_get_missing_profile(self, customers):
        with pytest.raises(NotFound):
            customers.get_profile(12)

    def test_update_replaces_picture(self, customers, objects):
        first = stored_upload(objects, "profile")
        created = run(customers.register(CUSTOMER, [first]))
        second = stored_upload(objects, "profile")

        run(customers.update_profile(created.id, {"full_name": "Asha R."}, [second]))

        profile = customers.get_profile(created.id)
        assert profile["full_name"] == "Asha R."
        assert profile["profile_url"] == second.url
        assert objects.deleted == [first.key]

    def test_update_ignores_password_hash_field(self, customers, store):
        created = run(customers.register(CUSTOMER))
        before = store.query_one("SELECT password_hash FROM customers")["password_hash"]
        run(customers.update_profile(created.id, {"phone": "9000000000", "password_hash": "x"}))
        assert store.query_one("SELECT password_hash FROM customers")["password_hash"] == before


class TestAdminAccounts:
    def test_register_and_login(self, admins, tokens):
        user_id = admins.register("Ops", "ops@example.com", "admin-pass")
        session = admins.login("ops@example.com", "admin-pass")

        identity = tokens.verify(session["token"])
        assert identity.user_id == user_id
        assert identity.role == "admin"
        assert session["user"] == {"id": user_id, "email": "ops@example.com", "name": "Ops"}

    def test_admin_token_expires_after_an_hour(self, admins):
        assert admins.token_ttl == timedelta(hours=1)

    def test_duplicate_email(self, admins):
        admins.register("Ops", "ops@example.com", "admin-pass")
        with pytest.raises(DuplicateKey) as exc:
            admins.register("Ops 2", "OPS@example.com", "other")
        assert exc.value.status_code == 409

    def test_missing_fields(self, admins):
        with pytest.raises(ValidationFailed):
            admins.register("Ops", "", "x")

    def test_bad_password(self, admins):
        admins.register("Ops", "ops@example.com", "admin-pass")
        with pytest.raises(Unauthorized):
            admins.login("ops@example.com", "nope")
