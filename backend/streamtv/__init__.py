"""StreamTV customer accounts, sessions, queue and watch history."""
