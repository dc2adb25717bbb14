"""Base class of the stages scenarios are written with."""

from __future__ import annotations

from pygiven.core.metadata import register_marks
from pygiven.core.state import register_state_fields


class Stage:
    """Chainable connectives plus the user's step methods.

    Subclasses declare step methods returning ``self``. The connectives
    ``and_`` and ``with_`` carry a trailing underscore because ``and`` and
    ``with`` are Python keywords; they are reported without it.
    """

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        register_marks(cls)
        register_state_fields(cls)

    def given(self):
        return self

    def when(self):
        return self

    def then(self):
        return self

    def and_(self):
        return self

    def but(self):
        return self

    def with_(self):
        return self
