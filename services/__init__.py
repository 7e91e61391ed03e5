"""
SkillSetGo Services

This package contains the core Python services of the job marketplace:
- shared: database access, error kinds, sessions, live subscriptions
- auth: user accounts, sign-in and sign-out
- jobs: job postings, saved jobs, search and filters
- applications: job applications and CSV export
- user_settings: per-user preferences
"""
