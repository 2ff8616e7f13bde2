"""HTTP API: routers and route dependencies."""
