"""
Job Portal - Flask + HTMX web portal for job applications.

Provides a public job board, a multi-step application form,
and an admin dashboard for reviewing applications and managing
jobs, stores, and admin accounts.
"""
