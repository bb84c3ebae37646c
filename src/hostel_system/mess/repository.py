from __future__ import annotations

from typing import Protocol, Sequence

from .model import MessMenu


class MessMenuRepository(Protocol):
    def list_all(self) -> Sequence[MessMenu]:
        raise NotImplementedError
