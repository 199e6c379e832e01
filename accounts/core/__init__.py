"""
Core utilities shared across the accounts package.

This package hosts configuration (env vars), logging setup, password hashing
and the SMTP mailer adapter. Services depend on these primitives instead of
reading os.environ or talking to smtplib directly.
"""
