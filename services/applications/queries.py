"""SQL queries for job applications."""

_APPLICATION_COLUMNS = """
        ja.application_id,
        ja.job_id,
        ja.applicant_id,
        ja.full_name,
        ja.email,
        ja.phone,
        ja.share_contact_info,
        ja.status,
        ja.applied_at,
        ja.updated_at
"""

# Row lock on the job keeps it from being closed or deleted mid-apply
GET_JOB_STATUS_FOR_APPLY = """
    SELECT job_id, status
    FROM marts.job_postings
    WHERE job_id = %s
    FOR SHARE
"""

GET_JOB_POSTER = """
    SELECT poster_id
    FROM marts.job_postings
    WHERE job_id = %s
"""

# The unique key on (job_id, applicant_id) makes a second application a no-op
# that returns no row
INSERT_APPLICATION = f"""
    INSERT INTO marts.job_applications AS ja (
        job_id, applicant_id, full_name, email, phone, share_contact_info,
        status, applied_at, updated_at
    )
    VALUES (%s, %s, %s, %s, %s, %s, 'pending', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    ON CONFLICT (job_id, applicant_id) DO NOTHING
    RETURNING {_APPLICATION_COLUMNS}
"""

GET_APPLICATIONS_FOR_JOB = f"""
    SELECT {_APPLICATION_COLUMNS}
    FROM marts.job_applications ja
    WHERE ja.job_id = %s
    ORDER BY ja.applied_at DESC, ja.application_id DESC
"""

GET_APPLICATIONS_FOR_JOBS = f"""
    SELECT {_APPLICATION_COLUMNS}
    FROM marts.job_applications ja
    WHERE ja.job_id = ANY(%s)
    ORDER BY ja.applied_at DESC, ja.application_id DESC
"""

GET_APPLICATION_FOR_JOB_AND_APPLICANT = f"""
    SELECT {_APPLICATION_COLUMNS}
    FROM marts.job_applications ja
    WHERE ja.job_id = %s AND ja.applicant_id = %s
"""

GET_APPLICATION_WITH_POSTER = f"""
    SELECT {_APPLICATION_COLUMNS},
        jp.poster_id
    FROM marts.job_applications ja
    INNER JOIN marts.job_postings jp
        ON ja.job_id = jp.job_id
    WHERE ja.application_id = %s
"""

GET_APPLICATIONS_FOR_APPLICANT = f"""
    SELECT {_APPLICATION_COLUMNS},
        jp.title,
        jp.company,
        jp.location,
        jp.job_type,
        jp.salary,
        jp.status AS job_status
    FROM marts.job_applications ja
    INNER JOIN marts.job_postings jp
        ON ja.job_id = jp.job_id
    WHERE ja.applicant_id = %s
    ORDER BY ja.applied_at DESC, ja.application_id DESC
"""

# Only pending applications can be decided; the WHERE clause makes the
# transition one-way even when two owners decide at once
UPDATE_APPLICATION_STATUS = f"""
    UPDATE marts.job_applications AS ja
    SET status = %s, updated_at = CURRENT_TIMESTAMP
    WHERE ja.application_id = %s AND ja.status = 'pending'
    RETURNING {_APPLICATION_COLUMNS}
"""

DELETE_PENDING_APPLICATION = """
    DELETE FROM marts.job_applications
    WHERE application_id = %s AND applicant_id = %s AND status = 'pending'
    RETURNING application_id
"""
