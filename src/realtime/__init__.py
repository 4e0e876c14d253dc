"""Session configuration and the credential-scoped relay to the realtime backend."""
