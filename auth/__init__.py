"""
auth — local authentication and session handling.

Provides:
  • Session token issuance & verification (JWT, HS256)
  • Password hashing (bcrypt)
  • Register / Login / Profile / Users API routes
  • ``get_current_user`` FastAPI dependency (session guard)
  • Error taxonomy rendered as ``{"error", "message"}`` JSON
"""
