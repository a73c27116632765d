from studio.models.gallery import Gallery
from studio.models.message import Message
from studio.models.setting import Setting
from studio.models.style import Style

__all__ = [
    "Gallery",
    "Message",
    "Setting",
    "Style",
]
