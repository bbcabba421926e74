"""ComparerRegistry — maps a configured comparer name to a fresh Comparer instance."""

from collections.abc import Callable

from ccx_tester.comparison.domain.comparer import Comparer
from ccx_tester.comparison.infrastructure.diff_tool import DiffToolComparer
from ccx_tester.comparison.infrastructure.difflib_comparer import DifflibComparer
from ccx_tester.comparison.infrastructure.errors import ComparerNotSupportedError

_REDUCED_CONTEXT_LINES = 3

_CONSTRUCTORS: dict[str, Callable[[], Comparer]] = {
    "diff": DiffToolComparer,
    "difflib": DifflibComparer,
    "difflib-reduced": lambda: DifflibComparer(context_lines=_REDUCED_CONTEXT_LINES),
}

# Names used by older settings files.
_ALIASES: dict[str, str] = {
    "diffplex": "difflib",
    "diffplexreduced": "difflib-reduced",
}


class ComparerRegistry:
    """Satisfies the ComparerFactory protocol structurally."""

    @property
    def names(self) -> list[str]:
        return sorted(_CONSTRUCTORS)

    def create(self, name: str) -> Comparer:
        """Return a new Comparer for name (case-insensitive).

        Raises:
            ComparerNotSupportedError: if name is not a known variant or alias.
        """
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        constructor = _CONSTRUCTORS.get(key)
        if constructor is None:
            raise ComparerNotSupportedError(name=name, supported=self.names)
        return constructor()
