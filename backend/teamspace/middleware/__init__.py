# Middleware package init
"""
Teamspace Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    - Request ID first so every later log line, including the access line,
      carries the correlation id
    - CORS innermost, as added by FastAPI's CORSMiddleware, so preflight
      requests are still logged
"""
