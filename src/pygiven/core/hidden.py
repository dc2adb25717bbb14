"""Hidden steps: executed, but left out of the report."""

from __future__ import annotations

from typing import Any

from pygiven.core.metadata import MethodMarker, StageMetadataStore


class HiddenMarker(MethodMarker):
    def add_hidden_step(self, stage_class: type, method_name: str) -> None:
        self.add_property(stage_class, method_name)


hidden_store: StageMetadataStore[str] = StageMetadataStore("@Hidden")

Hidden = HiddenMarker(hidden_store, "Hidden")


def is_hidden_step(stage: Any, step_name: str) -> bool:
    return Hidden.is_marked(stage, step_name)
