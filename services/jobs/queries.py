"""SQL queries for job postings and saved jobs."""

_JOB_COLUMNS = """
        jp.job_id,
        jp.poster_id,
        jp.title,
        jp.company,
        jp.location,
        jp.job_type,
        jp.salary,
        jp.description,
        jp.requirements,
        jp.responsibilities,
        jp.accessibility,
        jp.suitable_for,
        jp.distance_km,
        jp.contact_name,
        jp.contact_email,
        jp.contact_phone,
        jp.status,
        jp.created_at,
        jp.updated_at
"""

# Newest first; job_id breaks ties between postings created in the same instant
LIST_JOBS = f"""
    SELECT {_JOB_COLUMNS}
    FROM marts.job_postings jp
    ORDER BY jp.created_at DESC, jp.job_id DESC
"""

LIST_JOBS_BY_POSTER = f"""
    SELECT {_JOB_COLUMNS}
    FROM marts.job_postings jp
    WHERE jp.poster_id = %s
    ORDER BY jp.created_at DESC, jp.job_id DESC
"""

GET_JOB_BY_ID = f"""
    SELECT {_JOB_COLUMNS}
    FROM marts.job_postings jp
    WHERE jp.job_id = %s
"""

# Locks the row so an update or delete sees the same owner it checked
GET_JOB_FOR_UPDATE = f"""
    SELECT {_JOB_COLUMNS}
    FROM marts.job_postings jp
    WHERE jp.job_id = %s
    FOR UPDATE
"""

INSERT_JOB = """
    INSERT INTO marts.job_postings (
        poster_id, title, company, location, job_type, salary, description,
        requirements, responsibilities, accessibility, suitable_for, distance_km,
        contact_name, contact_email, contact_phone, status, created_at, updated_at
    )
    VALUES (
        %s, %s, %s, %s, %s, %s, %s,
        %s, %s, %s, %s, %s,
        %s, %s, %s, 'active', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
    )
    RETURNING job_id, status, created_at, updated_at
"""

UPDATE_JOB = """
    UPDATE marts.job_postings
    SET
        title = %s,
        company = %s,
        location = %s,
        job_type = %s,
        salary = %s,
        description = %s,
        requirements = %s,
        responsibilities = %s,
        accessibility = %s,
        suitable_for = %s,
        distance_km = %s,
        contact_name = %s,
        contact_email = %s,
        contact_phone = %s,
        status = %s,
        updated_at = CURRENT_TIMESTAMP
    WHERE job_id = %s AND poster_id = %s
    RETURNING updated_at
"""

DELETE_JOB = """
    DELETE FROM marts.job_postings
    WHERE job_id = %s AND poster_id = %s
    RETURNING job_id
"""

JOB_EXISTS = """
    SELECT 1 FROM marts.job_postings WHERE job_id = %s
"""

# Saved jobs

DELETE_SAVED_JOB = """
    DELETE FROM marts.saved_jobs
    WHERE user_id = %s AND job_id = %s
    RETURNING saved_job_id
"""

# A concurrent toggle may have inserted the same link first; the unique key
# on (user_id, job_id) turns that into a no-op
INSERT_SAVED_JOB = """
    INSERT INTO marts.saved_jobs (user_id, job_id, saved_at)
    VALUES (%s, %s, CURRENT_TIMESTAMP)
    ON CONFLICT (user_id, job_id) DO NOTHING
    RETURNING saved_job_id
"""

GET_SAVED_JOB_IDS = """
    SELECT DISTINCT job_id
    FROM marts.saved_jobs
    WHERE user_id = %s
"""

GET_SAVED_JOBS = f"""
    SELECT {_JOB_COLUMNS},
        sj.saved_at
    FROM marts.saved_jobs sj
    INNER JOIN marts.job_postings jp
        ON sj.job_id = jp.job_id
    WHERE sj.user_id = %s
    ORDER BY sj.saved_at DESC, sj.saved_job_id DESC
"""
