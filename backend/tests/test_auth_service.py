# Overview: Pytest coverage for accounts, password rules and session tokens.

from datetime import timedelta

import pytest

from myhouz.errors import ConflictError, NotFoundError, ValidationError
from myhouz.models import SessionToken
from myhouz.services import auth_service, session_service
from myhouz.services.auth_service import PasswordValidationError
from myhouz.time_utils import utcnow

from conftest import PASSWORD


class TestPasswordRules:

    @pytest.mark.parametrize("password", [
        "Short1!",
        "alllowercase1!",
        "ALLUPPERCASE1!",
        "NoDigitsHere!",
        "NoSpecial123",
        None,
    ])
    def test_weak_passwords_rejected(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_hash_and_verify(self):
        hashed = auth_service.hash_password(PASSWORD)

        assert hashed != PASSWORD
        assert auth_service.verify_password(PASSWORD, hashed)
        assert not auth_service.verify_password("Wrong123!", hashed)

    def test_malformed_hash_does_not_verify(self):
        assert not auth_service.verify_password(PASSWORD, "not-a-bcrypt-hash")


class TestCreateUser:

    def test_create_normalizes_email(self, db_session):
        user = auth_service.create_user("  Ana@Example.COM ", PASSWORD, "Ana", "Lopez", "professional")

        assert user.email == "ana@example.com"
        assert user.is_professional
        assert user.rating_count == 0

    def test_duplicate_email_conflicts(self, db_session, customer):
        with pytest.raises(ConflictError):
            auth_service.create_user("CUSTOMER@myhouz.test", PASSWORD, "Other", "Person")

    @pytest.mark.parametrize("email,first,last,user_type", [
        ("not-an-email", "Ana", "Lopez", "individual"),
        ("ana@example.com", "A", "Lopez", "individual"),
        ("ana@example.com", "Ana", "", "individual"),
        ("ana@example.com", "Ana", "Lopez", "admin"),
    ])
    def test_invalid_account_fields(self, db_session, email, first, last, user_type):
        with pytest.raises(ValidationError):
            auth_service.create_user(email, PASSWORD, first, last, user_type)


class TestAuthenticate:

    def test_valid_credentials(self, db_session, customer):
        user = auth_service.authenticate("Customer@MyHouz.test", PASSWORD)

        assert user.id == customer.id
        assert user.last_login_at is not None

    def test_wrong_password(self, db_session, customer):
        assert auth_service.authenticate(customer.email, "Wrong123!") is None

    def test_inactive_user(self, db_session, customer):
        customer.is_active = False
        db_session.commit()

        assert auth_service.authenticate(customer.email, PASSWORD) is None


class TestSessions:

    def test_only_hash_is_stored(self, db_session, customer):
        session, token = session_service.create_session(customer.id, user_agent="pytest")

        assert session.token_hash == session_service.hash_token(token)
        assert session.token_hash != token
        assert len(token) == 64

    def test_validate_returns_user(self, db_session, customer):
        _, token = session_service.create_session(customer.id)

        context = session_service.validate_session(token)

        assert context.user.id == customer.id

    def test_unknown_user_has_no_session(self, db_session):
        with pytest.raises(NotFoundError):
            session_service.create_session(9999)

    def test_unknown_token(self, db_session):
        assert session_service.validate_session("deadbeef") is None

    def test_revoked_token(self, db_session, customer):
        _, token = session_service.create_session(customer.id)

        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session(token) is False

    def test_idle_timeout_revokes(self, db_session, customer):
        session, token = session_service.create_session(customer.id)
        session.last_used_at = utcnow() - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(token) is None

        session = db_session.get(SessionToken, session.id)
        assert session.is_revoked
        assert session.revoked_reason == "Idle timeout"

    def test_absolute_timeout(self, db_session, customer):
        session, token = session_service.create_session(customer.id)
        session.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert session_service.validate_session(token) is None

    def test_deactivated_user(self, db_session, customer):
        _, token = session_service.create_session(customer.id)
        customer.is_active = False
        db_session.commit()

        assert session_service.validate_session(token) is None

    def test_cleanup_deletes_old_dead_sessions(self, db_session, customer):
        old, _ = session_service.create_session(customer.id)
        old.created_at = utcnow() - timedelta(days=40)
        old.expires_at = utcnow() - timedelta(days=39)
        session_service.create_session(customer.id)
        db_session.commit()

        assert session_service.cleanup_expired_sessions() == 1
        assert db_session.query(SessionToken).count() == 1
