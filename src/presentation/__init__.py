"""Presentation layer - HTTP surface and request guards.

Structure:
- routers/api/middleware/: trace, CSRF, rate limit and idempotency
  middleware plus request identity helpers
- routers/api/v1/: sessions, CSRF tokens, payments, webhooks, admin
- routers/system.py: root and health

Routers translate handler results into responses. Guard decisions are
made by the application and infrastructure services they call.
"""
