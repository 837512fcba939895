"""
Tests for the Unique API

Tests are organized by layer:
- test_value_objects.py, test_permissions.py, test_entities.py: domain rules
- test_services.py, test_use_cases.py: service and use case logic (in-memory fakes)
- test_repositories.py: SQLAlchemy repositories against in-memory SQLite
- test_users_api.py, test_roles_api.py: HTTP endpoints end to end
- test_config.py, test_logging.py: settings, log redaction, password hashing
"""
