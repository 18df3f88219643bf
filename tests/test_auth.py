"""Unit tests for the admin login helpers."""
import pytest

import auth
from database import ADMIN_CREDENTIALS


class TestEncoding:
    def test_encrypt_is_reversed_base64(self):
        # base64("admin123") == "YWRtaW4xMjM="
        assert auth.simple_encrypt("admin123") == "=MjMx4WatRWY"

    def test_decrypt_inverts_encrypt(self):
        assert auth.simple_decrypt(auth.simple_encrypt("sêcret")) == "sêcret"


class TestTokens:
    def test_check_token(self):
        assert auth.check_token(auth.ADMIN_TOKEN)
        assert not auth.check_token("other")
        assert not auth.check_token(None)

    def test_bearer_token(self):
        assert auth.bearer_token("Bearer abc") == "abc"
        assert auth.bearer_token(None) is None

    def test_verify(self):
        assert auth.verify(auth.ADMIN_TOKEN) == {"valid": True, "user": {"username": "admin"}}
        assert auth.verify("nope") == {"valid": False}
        assert auth.verify("") == {"valid": False}


class TestLogin:
    def test_default_credentials_when_table_missing(self, store):
        store.missing.add(ADMIN_CREDENTIALS)
        result = auth.login(store, "admin", "admin123")
        assert result == {"success": True, "token": auth.ADMIN_TOKEN, "user": {"username": "admin"}}

    def test_default_credentials_when_no_row(self, store):
        assert auth.login(store, "admin", "admin123")["token"] == auth.ADMIN_TOKEN

    def test_default_credentials_wrong_password(self, store):
        with pytest.raises(auth.Unauthorized):
            auth.login(store, "admin", "wrong")

    def test_stored_plain_password(self, store):
        store.tables[ADMIN_CREDENTIALS] = [{"username": "boss", "password": "pw", "encrypted_password": "x"}]
        assert auth.login(store, "boss", "pw")["user"] == {"username": "boss"}

    def test_stored_encrypted_password(self, store):
        store.tables[ADMIN_CREDENTIALS] = [
            {"username": "boss", "password": "changed", "encrypted_password": auth.simple_encrypt("old")}
        ]
        assert auth.login(store, "boss", "old")["success"] is True

    def test_stored_row_wrong_password(self, store):
        store.tables[ADMIN_CREDENTIALS] = [{"username": "admin", "password": "new", "encrypted_password": ""}]
        with pytest.raises(auth.Unauthorized):
            auth.login(store, "admin", "admin123")

    def test_store_error(self, store):
        store.failing[("select", ADMIN_CREDENTIALS)] = "connection refused"
        with pytest.raises(auth.Unauthorized) as exc:
            auth.login(store, "admin", "admin123")
        assert exc.value.message == "System error"


class TestEnsureAdminCredentials:
    def test_creates_row(self, store):
        assert auth.ensure_admin_credentials(store) is True
        [row] = store.tables[ADMIN_CREDENTIALS]
        assert row["username"] == "admin"
        assert row["password"] == "admin123"
        assert row["encrypted_password"] == auth.simple_encrypt("admin123")

    def test_creates_row_when_table_missing(self, store):
        store.missing.add(ADMIN_CREDENTIALS)
        assert auth.ensure_admin_credentials(store) is True
        assert len(store.tables[ADMIN_CREDENTIALS]) == 1

    def test_existing_row_kept(self, store):
        store.tables[ADMIN_CREDENTIALS] = [{"username": "admin", "password": "custom"}]
        assert auth.ensure_admin_credentials(store) is True
        assert store.tables[ADMIN_CREDENTIALS] == [{"username": "admin", "password": "custom"}]

    def test_insert_failure_not_fatal(self, store):
        store.failing[("insert", ADMIN_CREDENTIALS)] = "read only"
        assert auth.ensure_admin_credentials(store) is False
