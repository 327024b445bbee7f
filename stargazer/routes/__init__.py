# Routes package init
"""
Stargazer Backend — API Routes Package
=======================================

Route Inventory:
    - stars.py:   GET/POST /stars, GET/PUT/DELETE /stars/{name}
    - health.py:  GET /health

Routes stay thin: read the request, call star_service, shape the response.
"""
