"""Scenario tags."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional


def _default_description(tag: "Tag", value: Optional[str]) -> str:
    return tag.description


@dataclass(frozen=True)
class Tag:
    """A label attached to scenarios; call it to get a valued copy.

    ``Issue = build_tag("Issue")`` then ``scenario(func, tags=[Issue("42")])``.
    """
    name: str
    description: str = ""
    style: str = ""
    values: tuple[str, ...] = ()
    parent_tags: tuple["Tag", ...] = ()
    prepend_name: bool = False
    description_generator: Callable[["Tag", Optional[str]], str] = field(
        default=_default_description, compare=False, repr=False
    )

    def __call__(self, *values: str) -> "Tag":
        return replace(self, values=tuple(values))

    def ids(self) -> list[str]:
        if not self.values:
            return [self.name]
        return [f"{self.name}-{value}" for value in self.values]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "style": self.style,
            "values": list(self.values),
            "parentTags": [parent.name for parent in self.parent_tags],
            "prependName": self.prepend_name,
            "descriptions": {
                tag_id: self.description_generator(self, value)
                for tag_id, value in zip(self.ids(), self.values or (None,))
            },
        }


def build_tag(
    name: str,
    description: str = "",
    style: str = "",
    values: tuple[str, ...] = (),
    parent_tags: tuple[Tag, ...] = (),
    prepend_name: bool = False,
    description_generator: Callable[[Tag, Optional[str]], str] = _default_description,
) -> Tag:
    return Tag(
        name=name,
        description=description,
        style=style,
        values=tuple(values),
        parent_tags=tuple(parent_tags),
        prepend_name=prepend_name,
        description_generator=description_generator,
    )
