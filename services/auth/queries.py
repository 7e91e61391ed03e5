"""SQL queries for authentication and user management."""

_USER_COLUMNS = """
        user_id,
        email,
        display_name,
        password_hash,
        role,
        created_at,
        updated_at,
        last_login
"""

# Query to get user by email
GET_USER_BY_EMAIL = f"""
    SELECT {_USER_COLUMNS}
    FROM marts.users
    WHERE email = %s
"""

# Query to get user by ID
GET_USER_BY_ID = f"""
    SELECT {_USER_COLUMNS}
    FROM marts.users
    WHERE user_id = %s
"""

# Query to create a new user
INSERT_USER = """
    INSERT INTO marts.users (email, display_name, password_hash, role, created_at, updated_at)
    VALUES (%s, %s, %s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    RETURNING user_id
"""

# Query to update user's last login timestamp
UPDATE_USER_LAST_LOGIN = """
    UPDATE marts.users
    SET last_login = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
    WHERE user_id = %s
"""

UPDATE_USER_DISPLAY_NAME = """
    UPDATE marts.users
    SET display_name = %s, updated_at = CURRENT_TIMESTAMP
    WHERE user_id = %s
    RETURNING user_id
"""

# Sign-out: tokens are stateless, so revoked ones are remembered by jti
INSERT_REVOKED_TOKEN = """
    INSERT INTO marts.revoked_tokens (jti, user_id, revoked_at)
    VALUES (%s, %s, CURRENT_TIMESTAMP)
    ON CONFLICT (jti) DO NOTHING
"""

GET_REVOKED_TOKEN = """
    SELECT 1 FROM marts.revoked_tokens WHERE jti = %s
"""
