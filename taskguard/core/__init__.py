"""Application core: configuration, database and the authorization engine."""
