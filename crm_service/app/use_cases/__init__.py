"""
Use Cases

Organized by domain folder:
- auth/: registration, verification, login, logout and password flows
- users/: current user, authorization and session listing
"""
