from django.contrib.auth.hashers import BCryptPasswordHasher


class BCrypt10PasswordHasher(BCryptPasswordHasher):
    """Plain bcrypt at cost factor 10, stored as ``bcrypt$<digest>``."""

    rounds = 10
