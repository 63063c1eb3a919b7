"""Evaluation of a destination's template chain against one event."""

from __future__ import annotations

from typing import Optional, Tuple

from logrelay.errors import RenderError

from .events import EventContext
from .templates import TemplateChain


class RequestRenderer:
    def evaluate(
        self, destination: str, chain: TemplateChain, context: EventContext
    ) -> Tuple[str, ...]:
        """Run the chain in order and return the output of every template.

        Template ``i`` sees the outputs of templates ``0..i-1`` as
        ``executedTemplates``.
        """
        for index, template in enumerate(chain):
            try:
                output = template.render(context.template_data())
            except Exception as e:
                raise RenderError(destination, index, e) from e
            context = context.with_executed(output)
        return context.executed_templates

    def render(
        self, destination: str, chain: TemplateChain, context: EventContext
    ) -> Optional[str]:
        """Return the request body, ``None`` when the chain is empty."""
        outputs = self.evaluate(destination, chain, context)
        return outputs[-1] if outputs else None


__all__ = ["RequestRenderer"]
