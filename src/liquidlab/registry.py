"""Tag registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from liquidlab.tags import Tag


@dataclass
class TagRegistry:
    """Maps tag names to the tag classes that parse and render them."""

    _tags: dict[str, type[Tag]] = field(default_factory=dict)

    def register(self, tag_cls: type[Tag]) -> None:
        name = (tag_cls.name or "").strip()
        if not name:
            msg = f"{tag_cls.__name__} has no tag name."
            raise ValueError(msg)
        if name in self._tags:
            msg = f"tag '{name}' is already registered."
            raise ValueError(msg)
        self._tags[name] = tag_cls

    def register_many(self, tag_classes: tuple[type[Tag], ...] | list[type[Tag]]) -> None:
        for tag_cls in tag_classes:
            self.register(tag_cls)

    def get(self, name: str | None) -> type[Tag] | None:
        if name is None:
            return None
        return self._tags.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._tags)

    def __contains__(self, name: object) -> bool:
        return name in self._tags
