"""Static HTML served by the admin server."""
