"""Domain rules for user accounts (normalization, validation, entities)."""
