"""Third-party service clients."""
