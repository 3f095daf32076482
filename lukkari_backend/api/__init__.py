"""HTTP API layer: aiohttp application, routes and middleware."""
