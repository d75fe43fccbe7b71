# Routes package init
"""
Safe Haven Backend: API Routes Package
========================================

Route Inventory:
    - appointments.py: POST/GET /api/appointments, GET /api/appointments/{id},
                       PUT /api/appointments/{id}/status, PUT /api/appointments/{id}/notes
    - services.py:     GET /api/services, GET /api/services/{id},
                       GET /api/services/availability/{date}
    - contact.py:      POST /api/contact
    - auth.py:         POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - users.py:        PUT /api/users/me, PUT /api/users/{id}/active
    - health.py:       GET /health

Routes stay thin: unpack the request, call a service, shape the response.
"""
