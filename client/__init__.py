"""
client — on-device session layer of the mobile app.

Provides:
  • ``AuthApiClient`` (httpx) for the auth and catalog endpoints
  • ``SessionStore`` persisted key-value session (language survives logout)
  • ``SessionController`` owning the UI-facing ``AuthState``
"""
