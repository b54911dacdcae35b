"""Places Gateway Test Suite.

Test Structure:
- unit/: Unit tests for individual functions and classes
- integration/: Full events through the Lambda handler with HTTP mocked
"""
