from __future__ import annotations

from uuid import uuid4


class IdGenerator:
    """Hands out identifiers that are unique within one conversion run.

    The default prefix keeps every identifier a valid XML name.
    """

    def __init__(self, prefix: str = "id_") -> None:
        self.prefix = prefix
        self._issued: set[str] = set()

    def next_id(self) -> str:
        while True:
            candidate = f"{self.prefix}{uuid4().hex}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate
