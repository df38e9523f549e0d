"""
auth — account authentication module.

Provides:
  • Credential store over the ``users`` table (unique email)
  • Password hashing (bcrypt)
  • Signed session tokens (HS256, 7-day expiry)
  • Register / Login / Validate-session / Profile API routes
  • ``get_token_claims`` FastAPI dependency (bearer-token guard)
"""
