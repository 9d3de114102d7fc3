"""
Task App Test Suite
===================

This package contains unit and integration tests for the tasks application.

Modules:
--------
- test_engine: Unit tests for priority scoring and the impact/effort matrix
- test_orchestration: Classifier, cache, rate limiter, service and worker tests
- test_api: HTTP endpoints on top of the service

Running Tests:
--------------
    # From the repository root
    pytest

    # Or with Django's runner, from backend/
    python manage.py test tasks
    python manage.py test tasks.tests.test_engine
"""
