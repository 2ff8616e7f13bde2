"""Core application plumbing: configuration, errors, middleware, lifecycle."""
