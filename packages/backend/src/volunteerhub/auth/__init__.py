"""Authentication collaborator.

Users register with email/password and receive JWT access/refresh tokens.
Both the REST dependencies and the realtime gateway resolve a bearer
token to a live User record through resolve_token_user().
"""
