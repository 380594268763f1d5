# Routes package init
"""
PAWhere Backend — API Routes Package
======================================

Route Inventory:
    - registration.py:  POST /api/register       (intake)
                        GET  /api/registrations  (admin export)
                        GET  /api                (service index)
    - health.py:        GET  /api/health, /api/health/db

Routes stay thin: decode the request, call a service, return the model.
Errors are rendered by the global handlers in main.py.
"""
