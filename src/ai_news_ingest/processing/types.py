from __future__ import annotations

from typing import Any, Callable

LogFunc = Callable[[str], None]
ParseFunc = Callable[[str], Any]
SleepFunc = Callable[[float], None]
HttpGet = Callable[..., Any]
HttpPost = Callable[..., Any]
