"""CLI commands for fastwell."""

from .ai import ai
from .auth import auth
from .challenges import challenges, score
from .fasting import fast
from .init import init
from .profile import profile
from .serve import serve
from .weight import weight

__all__ = [
    "ai",
    "auth",
    "challenges",
    "fast",
    "init",
    "profile",
    "score",
    "serve",
    "weight",
]
