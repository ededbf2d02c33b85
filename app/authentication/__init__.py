"""
Authentication application.

This app provides email-based user authentication, JWT token endpoints, and
the Profile that carries buyer names and vendor farm names.

Key components:
    - User model: Custom email-based user authentication (UUID primary key)
    - Profile model: Extended user profile data

Usage:
    from authentication.models import User, Profile
"""
