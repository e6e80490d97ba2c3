"""
account_platform tests

Covers the authentication service in ``account_platform.auth_service``:

- Token signing/verification and password hashing (``auth.py``)
- Account store lookups and whole-record updates (``store.py``)
- Session verification for protected routes (``session.py``)
- Login and password reset routes (``routes/auth.py``)
"""
