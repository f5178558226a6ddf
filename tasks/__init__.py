"""tasks/ -- Task persistence and authorization-aware task operations.

Layer rule: tasks/ may import from core/ and auth/models only.
It does NOT import from api/.
"""
