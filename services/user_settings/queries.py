"""SQL queries for user settings and profiles."""

GET_USER_SETTINGS = """
    SELECT settings, updated_at
    FROM marts.user_settings
    WHERE user_id = %s
"""

UPSERT_USER_SETTINGS = """
    INSERT INTO marts.user_settings (user_id, settings, created_at, updated_at)
    VALUES (%s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    ON CONFLICT (user_id)
    DO UPDATE SET
        settings = EXCLUDED.settings,
        updated_at = CURRENT_TIMESTAMP
    RETURNING updated_at
"""

GET_USER_PROFILE = """
    SELECT profile, updated_at
    FROM marts.user_profiles
    WHERE user_id = %s
"""

UPSERT_USER_PROFILE = """
    INSERT INTO marts.user_profiles (user_id, profile, created_at, updated_at)
    VALUES (%s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    ON CONFLICT (user_id)
    DO UPDATE SET
        profile = marts.user_profiles.profile || EXCLUDED.profile,
        updated_at = CURRENT_TIMESTAMP
    RETURNING profile
"""
