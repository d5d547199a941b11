"""OpenAPI (REST) endpoints."""
