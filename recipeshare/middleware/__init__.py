# Middleware package init
"""
RecipeShare API: Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation ID used in logs and error bodies
    2. Logging: one access-log line per request with status and duration

Responses pass back through the chain in reverse order, so the X-Request-ID
header is present on every response, including error responses.
"""
