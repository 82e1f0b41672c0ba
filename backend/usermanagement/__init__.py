"""User Directory Package — stores users and narrows them by name, email and phone.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
