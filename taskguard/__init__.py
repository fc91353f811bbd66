"""Task management API with organization-scoped role based access control."""
