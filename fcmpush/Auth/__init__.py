# fcmpush/Auth/__init__.py
"""Authentication helpers: signed assertions and bearer token exchange."""
