"""
Model Registry
==============

Append-only mapping from a structured key to a fitted model.

Each key encodes the paradigm (``'lm'`` for OLS, ``'brm'`` for Bayesian),
whether the x2 → x2_resid transform was applied, the sample size and the
collinearity coefficient. Keys render to the names used throughout the
project, e.g. ``lm_n200_rho0.2`` or ``brm_resid_n4000_rho0.9``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Literal, NamedTuple, Tuple

from fwl_sim.dgp import check_n, check_rho


Paradigm = Literal["lm", "brm"]
PARADIGMS: Tuple[str, ...] = ("lm", "brm")

_NAME_RE = re.compile(
    r"^(?P<paradigm>lm|brm)(?P<resid>_resid)?_n(?P<n>\d+)_rho(?P<rho>-?\d+(?:\.\d+)?)$"
)


class ModelKey(NamedTuple):
    """Structured registry key: (paradigm, residualized, n, rho)."""
    paradigm: str
    residualized: bool
    n: int
    rho: float

    @classmethod
    def make(cls, paradigm: str, residualized: bool, n: int, rho: float) -> "ModelKey":
        """Validate and normalize the fields."""
        if paradigm not in PARADIGMS:
            raise ValueError(
                f"Unknown paradigm: '{paradigm}'. Choose from: {', '.join(PARADIGMS)}"
            )
        return cls(paradigm, bool(residualized), check_n(n), check_rho(rho))

    @property
    def name(self) -> str:
        resid = "_resid" if self.residualized else ""
        return f"{self.paradigm}{resid}_n{self.n}_rho{self.rho:.1f}"

    @property
    def cell(self) -> Tuple[int, float]:
        return (self.n, self.rho)

    @classmethod
    def parse(cls, name: str) -> "ModelKey":
        """
        Invert ``name``.

        Note that ``rho`` is recovered at one-decimal precision.

        >>> ModelKey.parse("brm_resid_n4000_rho0.9")
        ModelKey(paradigm='brm', residualized=True, n=4000, rho=0.9)
        """
        m = _NAME_RE.match(name)
        if m is None:
            raise ValueError(f"Malformed model name: {name!r}")
        return cls(
            m.group("paradigm"),
            m.group("resid") is not None,
            int(m.group("n")),
            float(m.group("rho")),
        )

    def __str__(self) -> str:
        return self.name


def cell_keys(n: int, rho: float) -> List[ModelKey]:
    """The four keys of one grid cell: lm, brm, lm_resid, brm_resid."""
    return [
        ModelKey.make(paradigm, residualized, n, rho)
        for residualized in (False, True)
        for paradigm in PARADIGMS
    ]


class ModelRegistry(Mapping):
    """
    Append-only mapping ``ModelKey -> fitted model``.

    Iteration follows registration order. Registering a key twice raises
    ``ValueError``; there is no removal.

    Examples
    --------
    >>> registry = ModelRegistry()
    >>> registry.add(ModelKey.make("lm", False, 200, 0.2), "model")
    >>> registry.by_name("lm_n200_rho0.2")
    'model'
    """

    def __init__(self) -> None:
        self._models: Dict[ModelKey, Any] = {}
        self._names: Dict[str, ModelKey] = {}

    def add(self, key: ModelKey, model: Any) -> None:
        if not isinstance(key, ModelKey):
            raise TypeError(f"key must be a ModelKey, got {type(key).__name__}")
        if key in self._models:
            raise ValueError(f"Model '{key.name}' is already registered")
        if key.name in self._names:
            raise ValueError(
                f"Model name '{key.name}' collides with {self._names[key.name]!r}"
            )
        self._models[key] = model
        self._names[key.name] = key

    def __getitem__(self, key: ModelKey) -> Any:
        return self._models[key]

    def __iter__(self) -> Iterator[ModelKey]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def get_model(self, paradigm: str, residualized: bool, n: int, rho: float) -> Any:
        """Look up by fields; raises KeyError if absent."""
        return self._models[ModelKey.make(paradigm, residualized, n, rho)]

    def by_name(self, name: str) -> Any:
        """Look up by rendered name, e.g. ``'lm_resid_n1000_rho0.5'``."""
        try:
            return self._models[self._names[name]]
        except KeyError:
            raise KeyError(f"No model named '{name}'") from None

    def names(self) -> List[str]:
        return list(self._names)

    def cells(self) -> List[Tuple[int, float]]:
        """Distinct (n, rho) cells in registration order."""
        seen: Dict[Tuple[int, float], None] = {}
        for key in self._models:
            seen.setdefault(key.cell, None)
        return list(seen)

    def models_for(self, n: int, rho: float) -> Dict[ModelKey, Any]:
        """All models of one grid cell."""
        return {k: m for k, m in self._models.items() if k.cell == (n, rho)}

    def __repr__(self) -> str:
        return f"ModelRegistry({len(self)} models, {len(self.cells())} cells)"


__all__ = [
    "Paradigm",
    "PARADIGMS",
    "ModelKey",
    "ModelRegistry",
    "cell_keys",
]
