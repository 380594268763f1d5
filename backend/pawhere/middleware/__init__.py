# Middleware package init
"""
PAWhere Backend — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Unhandled Error] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging records status and duration once the response exists
    3. CORS answers preflight requests from the landing page origin
    4. Unhandled errors become a 500 body inside CORS, so browsers can read it
"""
