from typing import TYPE_CHECKING, Callable
from datetime import datetime

if TYPE_CHECKING:
    from .line_channel import LineChannel


Address = tuple[str, int]

Clock = Callable[[], datetime]

ConnectionCallback = Callable[["LineChannel"], None]
