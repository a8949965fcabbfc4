# Routes package init
"""
NoteDeck Backend — API Routes Package
======================================

Route Inventory:
    - notes.py:    GET    /api/notes            (list every note)
                   POST   /api/notes            (create from form fields)
                   DELETE /api/notes/{id}       (delete by id)
    - profile.py:  GET    /api/profile          (signed-in user's profile)
    - health.py:   GET    /health               (service health check)

Routes stay thin: extract request data, call a service, shape the response.
"""
