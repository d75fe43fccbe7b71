# Middleware package init
"""
Safe Haven Backend: Middleware Package
========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID first, so even a rate-limited 429 carries an id
    2. Rate limit before any work is done for abusive clients
    3. Logging sees the final status and duration
"""
