"""
Process-wide lookup of parametric families by name.
"""

from __future__ import annotations

__author__ = "EnvSim developers"
__copyright__ = "Copyright (c) 2025 EnvSim project"
__license__ = "SPDX-License-Identifier: MIT"

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import ClassVar

    from envsim.families.parametric_family import ParametricFamily


class ParametricFamilyRegister:
    """
    Singleton mapping family names to :class:`ParametricFamily` objects.

    Distributions store only their family name and look the family up here,
    so a family must be registered before its distributions are evaluated.
    """

    _instance: ClassVar[ParametricFamilyRegister | None] = None
    _families: dict[str, ParametricFamily]

    def __new__(cls) -> ParametricFamilyRegister:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._families = {}
            cls._instance = instance
        return cls._instance

    @classmethod
    def get(cls, name: str) -> ParametricFamily:
        """
        Family registered under ``name``.

        Raises
        ------
        ValueError
            If nothing is registered under ``name``.
        """
        families = cls()._families
        try:
            return families[name]
        except KeyError:
            raise ValueError(f"No family {name} found in register") from None

    @classmethod
    def contains(cls, name: str) -> bool:
        return name in cls()._families

    @classmethod
    def names(cls) -> list[str]:
        """Registered names, oldest first."""
        return list(cls()._families)

    @classmethod
    def register(cls, family: ParametricFamily) -> None:
        """
        Add ``family``; names are unique.

        Raises
        ------
        ValueError
            If the name is taken.
        """
        families = cls()._families
        if family.name in families:
            raise ValueError(f"Family {family.name} already found in register")
        families[family.name] = family

    @classmethod
    def _reset(cls) -> None:
        """Forget the singleton and every family in it."""
        cls._instance = None
