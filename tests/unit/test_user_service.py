"""Unit tests for UserService."""

import bcrypt
import psycopg2
import pytest

from auth.user_service import UserService
from shared.errors import AuthRequired, NotFound, ValidationFailed


@pytest.fixture
def user_service(mock_database):
    """Create a UserService instance with mocked database."""
    return UserService(database=mock_database)


class TestUserService:
    """Test cases for UserService."""

    def test_init_requires_database(self):
        """Test that UserService requires a database."""
        with pytest.raises(ValueError, match="Database is required"):
            UserService(database=None)

    def test_hash_password(self, user_service):
        """Test password hashing."""
        hash_result = user_service._hash_password("testpassword123")

        assert hash_result.startswith("$2b$")  # bcrypt hash prefix
        assert hash_result != "testpassword123"

    def test_verify_password(self, user_service):
        """Test password verification with correct and wrong passwords."""
        password_hash = bcrypt.hashpw(b"testpassword123", bcrypt.gensalt()).decode("utf-8")

        assert user_service.verify_password("testpassword123", password_hash) is True
        assert user_service.verify_password("wrongpassword", password_hash) is False

    def test_verify_password_malformed_hash(self, user_service):
        """Test that a malformed hash fails verification instead of raising."""
        assert user_service.verify_password("testpassword123", "not-a-hash") is False

    @pytest.mark.parametrize(
        "email,password,display_name,role,field",
        [
            ("", "password123", "Asha", "seeker", "email"),
            ("not-an-email", "password123", "Asha", "seeker", "email"),
            ("asha@example.com", "short", "Asha", "seeker", "password"),
            ("asha@example.com", "password123", " ", "seeker", "display_name"),
            ("asha@example.com", "password123", "Asha", "admin", "role"),
        ],
    )
    def test_create_user_validation(
        self, user_service, mock_cursor, email, password, display_name, role, field
    ):
        """Test that invalid sign-up input is rejected before any write."""
        with pytest.raises(ValidationFailed) as exc_info:
            user_service.create_user(email, password, display_name, role)

        assert exc_info.value.fields == [field]
        mock_cursor.execute.assert_not_called()

    def test_create_user_duplicate_email(self, user_service, mock_cursor):
        """Test that an existing email is rejected."""
        mock_cursor.description = [("user_id",), ("email",)]
        mock_cursor.fetchone.return_value = (1, "asha@example.com")

        with pytest.raises(ValidationFailed, match="already registered"):
            user_service.create_user("Asha@Example.com", "password123", "Asha")

        lookup_params = mock_cursor.execute.call_args[0][1]
        assert lookup_params == ("asha@example.com",)

    def test_create_user_duplicate_email_race(self, user_service, mock_cursor):
        """Test that a unique violation on insert is reported as a duplicate."""
        mock_cursor.description = [("user_id",)]
        mock_cursor.fetchone.return_value = None
        mock_cursor.execute.side_effect = [None, psycopg2.IntegrityError("duplicate key")]

        with pytest.raises(ValidationFailed, match="already registered"):
            user_service.create_user("asha@example.com", "password123", "Asha")

    def test_create_user_success(self, user_service, mock_cursor):
        """Test that a user is created with a hashed password and lower-cased email."""
        mock_cursor.description = [("user_id",)]
        mock_cursor.fetchone.side_effect = [None, (42,)]

        user_id = user_service.create_user(" Asha@Example.com ", "password123", "Asha", "employer")

        assert user_id == 42
        email, display_name, password_hash, role = mock_cursor.execute.call_args[0][1]
        assert email == "asha@example.com"
        assert display_name == "Asha"
        assert password_hash.startswith("$2b$")
        assert role == "employer"

    def test_get_profile_strips_hash(self, user_service, mock_cursor, seeker_session):
        """Test that the profile never contains the password hash."""
        mock_cursor.description = [("user_id",), ("email",), ("password_hash",)]
        mock_cursor.fetchone.return_value = (1, "asha@example.com", "$2b$hash")

        assert user_service.get_profile(seeker_session) == {
            "user_id": 1,
            "email": "asha@example.com",
        }

    def test_get_profile_requires_session(self, user_service):
        """Test that the profile needs a signed-in user."""
        with pytest.raises(AuthRequired):
            user_service.get_profile(None)

    def test_update_display_name(self, user_service, mock_cursor, seeker_session):
        """Test that the display name is trimmed and stored."""
        mock_cursor.fetchone.return_value = (1,)

        user_service.update_display_name(seeker_session, "  Asha P  ")

        assert mock_cursor.execute.call_args[0][1] == ("Asha P", seeker_session.user_id)

    def test_update_display_name_blank(self, user_service, seeker_session):
        """Test that a blank display name is rejected."""
        with pytest.raises(ValidationFailed):
            user_service.update_display_name(seeker_session, "   ")

    def test_update_display_name_missing_user(self, user_service, mock_cursor, seeker_session):
        """Test that a deleted user raises NotFound."""
        mock_cursor.fetchone.return_value = None

        with pytest.raises(NotFound):
            user_service.update_display_name(seeker_session, "Asha")
