# Middleware package init
"""
Tourify Backend — Middleware Package
=====================================

Cross-cutting concerns applied to every request.

Execution order (see create_app, last added runs first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    Rate-limited requests are rejected before they get an id or a log line;
    the access log sees the request id and the final status code.
"""
