"""Synthetic data generation backed by Faker providers."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

from faker import Faker

from rapidworker.context import Context
from rapidworker.model import ActionOutcome

from .base import BaseAction


@lru_cache(maxsize=1)
def default_faker() -> Faker:
    return Faker()


def generator_groups(fake: Faker) -> Dict[str, Any]:
    """
    Map provider group name -> provider instance.

    The group is the provider package under ``faker.providers``, e.g. a
    ``faker.providers.person.en_US.Provider`` is the ``person`` group.
    """
    groups: Dict[str, Any] = {}
    for provider in fake.get_providers():
        parts = type(provider).__module__.split(".")
        if len(parts) >= 3 and parts[:2] == ["faker", "providers"]:
            groups.setdefault(parts[2], provider)
    return groups


def find_generator(provider: Any, function: str):
    if function.startswith("_"):
        return None
    fn = getattr(provider, function, None)
    return fn if callable(fn) else None


class FakerGenerate(BaseAction):
    """Parameters: category, function, variable."""

    name = "Faker.generate"

    def __init__(self, parameters: Optional[Dict[str, Any]] = None, fake: Optional[Faker] = None):
        super().__init__(parameters)
        self.fake = fake or default_faker()

    async def _evaluate(self, context: Context, started: float) -> ActionOutcome:
        category = self.parameters.get("category")
        function = self.parameters.get("function")

        if not category:
            return self.fail("Category must be selected, got none", started)
        if not function:
            return self.fail("Function must be selected, got none", started)

        provider = generator_groups(self.fake).get(category)
        if provider is None:
            return self.fail(f"Got invalid category {category}", started)

        generate = find_generator(provider, function)
        if generate is None:
            return self.fail(f"Got invalid function {function}", started)

        value = generate()
        variable = self.parameters.get("variable")
        if variable:
            context.set(variable, value)
        return ActionOutcome(
            action_reports=[
                self.report(True, f"Faked {category}.{function} and got value {value}", started)
            ]
        )
