from yuroku.models.image import Image
from yuroku.models.log_entry import FEATURES, SPRING_TYPES, LogEntry
from yuroku.models.user import User

__all__ = [
    "FEATURES",
    "Image",
    "LogEntry",
    "SPRING_TYPES",
    "User",
]
