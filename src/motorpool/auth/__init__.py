"""Authentication.

Learn: username/password registration stores a bcrypt hash; successful
registration or authentication returns a stateless JWT. Protected routes
depend on require_identity, which verifies the Bearer token and yields
the caller's claims.
"""
