from __future__ import annotations


class GridMismatchError(ValueError):
    """Two grids used together do not share dimensions, spacing and registration."""

    def __init__(self, what: str, detail: str) -> None:
        self.what = what
        self.detail = detail
        super().__init__(f"Grids are not co-registered ({what}): {detail}")


class MissingParameterError(ValueError):
    """A run needs a parameter that was neither configured nor supplied as a grid."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Must set {what}")
