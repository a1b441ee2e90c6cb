"""
Integration Tests
=================

Tests that verify components work together correctly.
These tests may:
- Take longer than unit tests (but still < 5s each)
- Start threads or run ``python -m kvtx`` as a child process
- Drive the shell end to end

Run with: python -m pytest tests/integration/ -v
"""
