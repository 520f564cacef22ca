"""CLI command tests."""

from datetime import timedelta

from puantaj.extensions import db
from puantaj.models import SessionToken, User
from puantaj.services import session_service
from puantaj.time_utils import utcnow


class TestCli:
    def test_create_and_list_users(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "users", "create", "--email", "Usta@Puantaj.Test", "--password", "Password123", "--role", "ADMIN",
        ])
        assert result.exit_code == 0, result.output
        assert "PASS Created user usta@puantaj.test" in result.output

        result = runner.invoke(args=["users", "list"])
        assert "usta@puantaj.test" in result.output

    def test_create_user_weak_password_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "create", "--email", "a@b.co", "--password", "short"])
        assert result.exit_code != 0
        assert db.session.query(User).count() == 0

    def test_suspend_deletes_sessions(self, app, user, token):
        result = app.test_cli_runner().invoke(args=["users", "suspend", "owner@puantaj.test"])
        assert result.exit_code == 0, result.output
        assert db.session.query(SessionToken).count() == 0

    def test_suspend_unknown_user(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "suspend", "ghost@puantaj.test"])
        assert result.exit_code != 0
        assert "User not found" in result.output

    def test_sessions_cleanup(self, app, user):
        expired, _ = session_service.create_session(user.id)
        expired.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

        result = app.test_cli_runner().invoke(args=["sessions", "cleanup"])
        assert "PASS Deleted 1 expired sessions" in result.output

    def test_system_init_is_idempotent(self, app, db_session):
        runner = app.test_cli_runner()
        first = runner.invoke(args=["system", "init"])
        second = runner.invoke(args=["system", "init"])
        assert "Created admin" in first.output
        assert "Using existing admin" in second.output
        assert db.session.query(User).filter_by(role="ADMIN").count() == 1
