"""Runtime value objects produced while walking a command tree.

* :class:`Surface` — what the user explicitly typed for one node.
* :class:`Builder` — the mutable accumulator filled from flags,
  derived defaults and prompts.
* :class:`Scope` — the frozen, validated values of one node.
* :class:`WalkStep` / :class:`WalkResult` — the record of a walk.

Everything except :class:`Builder` is immutable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FieldSource(Enum):
    """Where a builder value came from."""

    FLAG = "flag"
    DERIVED = "derived"
    PROMPT = "prompt"


class NodeState(Enum):
    """Resolution state of the node currently being visited."""

    NEEDS_INPUT = "needs_input"
    VALIDATING = "validating"
    DONE = "done"


# ---------------------------------------------------------------------------
# Parsed command-line surface
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Surface:
    """Explicitly supplied values for one node, parallel to the tree.

    ``values`` only contains fields present on the command line.
    ``selected`` is the variant named for a choice node.  ``child`` is
    the surface of the next node on the path, if the user reached it.
    """

    node_id: str
    values: Mapping[str, Any] = field(default_factory=dict)
    selected: str | None = None
    child: Surface | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def supplied(self, name: str) -> bool:
        return name in self.values


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------

class Scope(Mapping[str, Any]):
    """Frozen, validated field values of one visited node.

    Values are reachable both as mapping items and as attributes::

        scope["account_id"] == scope.account_id
    """

    __slots__ = ("_node_id", "_values")

    def __init__(self, node_id: str, values: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_node_id", node_id)
        object.__setattr__(self, "_values", MappingProxyType(dict(values)))

    @property
    def node_id(self) -> str:
        return self._node_id

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(
                f"scope of {self._node_id!r} has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Scope is immutable")

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scope):
            return NotImplemented
        return self._node_id == other._node_id and dict(self._values) == dict(other._values)

    def __hash__(self) -> int:
        return hash((self._node_id, tuple(sorted(self._values))))

    def __repr__(self) -> str:
        return f"Scope({self._node_id!r}, {dict(self._values)!r})"

    def __copy__(self) -> Scope:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Scope:
        return self

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class Builder:
    """Mutable, partially filled accumulator for one node's fields.

    A fresh builder represents "nothing supplied yet".  Each field is set
    independently and remembers its :class:`FieldSource`.  The builder is
    consumed exactly once by :meth:`freeze`.
    """

    def __init__(self, node_id: str) -> None:
        self.node_id: str = node_id
        self._values: dict[str, Any] = {}
        self._sources: dict[str, FieldSource] = {}
        self._frozen: bool = False

    def __repr__(self) -> str:
        return f"Builder({self.node_id!r}, {self._values!r})"

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    def set(self, name: str, value: Any, source: FieldSource) -> None:
        self._check_open()
        self._values[name] = value
        self._sources[name] = source

    def unset(self, name: str) -> None:
        self._check_open()
        self._values.pop(name, None)
        self._sources.pop(name, None)

    def is_set(self, name: str) -> bool:
        return name in self._values

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def source(self, name: str) -> FieldSource | None:
        return self._sources.get(name)

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view of the values collected so far."""
        return MappingProxyType(dict(self._values))

    def copy(self) -> Builder:
        clone = Builder(self.node_id)
        clone._values = dict(self._values)
        clone._sources = dict(self._sources)
        return clone

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------

    def freeze(self) -> Scope:
        """Turn the collected values into a :class:`Scope`.

        Raises
        ------
        RuntimeError
            If the builder was already frozen.
        """
        self._check_open()
        self._frozen = True
        return Scope(self.node_id, self._values)

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError(f"builder for {self.node_id!r} was already frozen")


# ---------------------------------------------------------------------------
# Walk record
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WalkStep:
    """One committed node visit."""

    node_id: str
    scope: Scope
    prompted: bool = False
    """Whether any value of this step was obtained interactively."""


@dataclass(frozen=True, slots=True)
class WalkResult:
    """Outcome of a full walk down to a leaf."""

    exit_code: int
    steps: tuple[WalkStep, ...]
    context: Any
    """The context handed to the leaf action."""

    @property
    def prompted(self) -> bool:
        return any(step.prompted for step in self.steps)
