# Routes package init
"""
Teamspace Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:       /api/auth      register, login, profile, password, account
    - notes.py:      /api/notes     note CRUD, listing, search, soft delete
    - teams.py:      /api/teams     current team and roster
    - events.py:     /api/events    team calendar
    - messaging.py:  /api/messaging conversations, messages, read state
    - health.py:     /health        service health check

Design Principle:
    Routes are THIN. They extract request data, resolve the caller, branch to
    offline fixtures in mock mode, call a service, and shape the response.
"""
