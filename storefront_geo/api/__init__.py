"""HTTP layer: routes, response schemas and error handling."""
