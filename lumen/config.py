"""
Front-end options for a Lumen parse run.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class FrontendOptions:
    """
    Settings shared by the lexer, parser and diagnostic collector.

    Attributes:
        filename: Name recorded in every source location
        max_diagnostics: Cap on recorded diagnostics; None keeps all of them
        warn_on_fallthrough: Warn when a non-empty switch case runs into the next one
        warn_on_unknown_escape: Warn on escapes such as '\\q' inside literals
    """
    filename: str = "<input>"
    max_diagnostics: Optional[int] = None
    warn_on_fallthrough: bool = False
    warn_on_unknown_escape: bool = True

    def __post_init__(self):
        if self.max_diagnostics is not None and self.max_diagnostics < 1:
            raise ValueError(f"max_diagnostics must be positive, got {self.max_diagnostics}")
