"""
Named parameter sets of a family.

Each parametrization is a frozen dataclass. Validity conditions are instance
methods decorated with :func:`constraint`; a parametrization other than the
family's base overrides :meth:`Parametrization.transform_to_base_parametrization`.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from abc import ABC
from dataclasses import dataclass, fields, is_dataclass
from functools import wraps
from inspect import isfunction
from typing import TYPE_CHECKING, ParamSpec

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any, ClassVar

    from envsim.families.parametric_family import ParametricFamily
    from envsim.types import ParametrizationName

_CONSTRAINT_FLAG = "__is_constraint"
_CONSTRAINT_DESCRIPTION = "__constraint_description"


@dataclass(slots=True, frozen=True)
class ParametrizationConstraint:
    """Predicate ``check(parameters)`` with the text shown when it fails."""

    description: str
    check: Callable[[Any], bool]


class Parametrization(ABC):
    """Base class of every parametrization dataclass."""

    # filled in by @parametrization
    __family__: ClassVar[ParametricFamily]
    __param_name__: ClassVar[ParametrizationName]
    _constraints: ClassVar[list[ParametrizationConstraint]] = []

    @property
    def name(self) -> str:
        return type(self).__param_name__

    @classmethod
    def parameter_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))  # type: ignore[arg-type]

    @property
    def parameters(self) -> dict[str, Any]:
        """Field values keyed by field name."""
        return {field_name: getattr(self, field_name) for field_name in self.parameter_names()}

    @property
    def constraints(self) -> list[ParametrizationConstraint]:
        return self._constraints

    def failed_constraints(self) -> list[ParametrizationConstraint]:
        return [c for c in self._constraints if not c.check(self)]

    def is_valid(self) -> bool:
        return not self.failed_constraints()

    def validate(self) -> None:
        """
        Raise ``ValueError`` naming the first constraint that does not hold.
        """
        failed = self.failed_constraints()
        if failed:
            raise ValueError(f'Constraint "{failed[0].description}" does not hold')

    def transform_to_base_parametrization(self) -> Parametrization:
        """Equivalent parameters in the base parametrization; identity here."""
        return self


P = ParamSpec("P")


def constraint(description: str) -> Callable[[Callable[P, bool]], Callable[P, bool]]:
    """
    Mark an instance method as a validity condition.

    ``description`` appears in the ``ValueError`` raised on violation.
    """

    def mark(func: Callable[P, bool]) -> Callable[P, bool]:
        @wraps(func)
        def check(*args: P.args, **kwargs: P.kwargs) -> bool:
            return func(*args, **kwargs)

        setattr(check, _CONSTRAINT_FLAG, True)
        setattr(check, _CONSTRAINT_DESCRIPTION, description)
        return check

    return mark


def _is_marked(obj: object) -> bool:
    return bool(getattr(obj, _CONSTRAINT_FLAG, False))


def _collect_constraints(cls: type[Parametrization]) -> list[ParametrizationConstraint]:
    found: list[ParametrizationConstraint] = []
    for attr_name, attr in vars(cls).items():
        if isinstance(attr, (staticmethod, classmethod)):
            if _is_marked(attr.__func__):
                raise TypeError(f"@constraint '{attr_name}' must be an instance method")
        elif isfunction(attr) and _is_marked(attr):
            found.append(
                ParametrizationConstraint(
                    description=getattr(attr, _CONSTRAINT_DESCRIPTION, attr.__name__),
                    check=attr,
                )
            )
    return found


def parametrization(
    *,
    family: ParametricFamily,
    name: str,
) -> Callable[[type[Parametrization]], type[Parametrization]]:
    """
    Class decorator attaching a parametrization to ``family`` under ``name``.

    Plain classes become frozen slotted dataclasses. The family must declare
    ``name`` and must not already hold a class for it.
    """

    def attach(cls: type[Parametrization]) -> type[Parametrization]:
        if not is_dataclass(cls):
            cls = dataclass(slots=True, frozen=True)(cls)
        cls.__family__ = family
        cls.__param_name__ = name
        cls._constraints = _collect_constraints(cls)
        family.register_parametrization(name, cls)
        return cls

    return attach
