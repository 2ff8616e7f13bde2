"""Authentication: bearer tokens, password hashing and route dependencies."""
