"""Infrastructure layer - Adapters behind the domain protocols.

Structure:
- persistence/: SQLAlchemy models and repositories (lockouts, idempotency
  records, sessions, security events)
- rate_limit/: in-memory and Redis rate limiter backends
- security/: CSRF tokens, bcrypt hashing, credential verification
- logging/: structlog console adapter
- maintenance/: periodic expiry sweeps
- payments/: payment gateway adapter

The domain layer never imports from here.
"""
