"""core/ -- Configuration, error taxonomy, and schema shared by every layer.

Layer rule: core/ imports only stdlib and third-party libraries. It does NOT
import from api/, auth/ or tasks/.
"""
