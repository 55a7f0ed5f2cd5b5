"""Organization-scoped conversation reads."""
