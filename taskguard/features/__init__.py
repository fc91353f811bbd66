"""Feature modules. Each one owns its models, schemas, dependencies and routes."""
