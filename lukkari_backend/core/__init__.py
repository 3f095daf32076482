"""Core infrastructure: configuration, logging, clock, HTTP client and wiring."""
