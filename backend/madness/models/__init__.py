from madness.models.bracket_blob import BracketBlob
from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.models.vote import Vote

__all__ = [
    "Tenant",
    "Option",
    "Vote",
    "BracketBlob",
]
