"""Authentication service: account registration, login, and bearer tokens."""
