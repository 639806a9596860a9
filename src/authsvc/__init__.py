"""Account registration, password and Google login, and session tokens."""
