"""Errors raised at the parameter boundary."""

from __future__ import annotations


class InvalidParametersError(ValueError):
    """Parameters are structurally invalid; no simulation was run."""

    def __init__(self, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid parameters")
