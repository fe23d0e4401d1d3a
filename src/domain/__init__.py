"""Domain layer - Guard records, policies and ports.

Structure:
- entities/: rate limit, lockout, idempotency and CSRF token records
- value_objects/: policies and decisions returned by the guards
- protocols/: repository and service ports implemented by infrastructure
- events/: security events for the audit trail
- enums/, errors/: actions, event types and guard error dataclasses

No framework imports; everything here is plain Python.
"""
