"""Domain models for reading figures off a rendered diary page."""

from dataclasses import dataclass

_HIDDEN_DISPLAY = "none"
_HIDDEN_VISIBILITY = "hidden"


@dataclass(frozen=True)
class DomCandidate:
    """A rendered page element offered to the label scanner.

    ``ancestor_text`` is the text of the nearest containing block-level
    element (row, list item, section, article or div).
    """

    text: str
    width: float = 0.0
    height: float = 0.0
    display: str = "block"
    visibility: str = "visible"
    ancestor_text: str | None = None

    @property
    def visible(self) -> bool:
        """Return True when the element is rendered with a non-zero box."""
        if self.display == _HIDDEN_DISPLAY or self.visibility == _HIDDEN_VISIBILITY:
            return False
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class ScrapeMatchConfig:
    """Window sizes used when looking for a number near a label."""

    label_window_chars: int = 120
    max_candidate_text_chars: int = 400
    max_ancestor_text_chars: int = 1000
