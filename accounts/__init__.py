"""User account management backend (registration, profile updates, lifecycle)."""
