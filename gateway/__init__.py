"""Plugin installation tools for the API gateway."""
