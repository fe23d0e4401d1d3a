"""Application layer - Use cases around the guards.

Structure:
- commands/: authenticate, create and revoke sessions, unlock accounts
- queries/: lockout status
- services/: lockout tracker, idempotency guard, security event recorder
- errors/: ApplicationError returned by handlers
"""
