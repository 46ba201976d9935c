"""Tool selection tags."""

from dataclasses import dataclass
from typing import Optional

from ..constants import Tools
from ..enums import ToolKind


@dataclass(frozen=True)
class ToolSelection:
    """The active tool and the tag it was selected with.

    A creation tool's tag doubles as the type of the markers it creates.
    """
    kind: ToolKind = ToolKind.NONE
    tag: Optional[str] = None

    @classmethod
    def parse(cls, tag: Optional[str]) -> "ToolSelection":
        """Classify a toolbar tag.

        ``"delete"`` selects the delete tool, ``"calibrate"`` allows moving
        markers only, None (or an empty tag) selects nothing, and any other tag
        creates markers of that type.
        """
        if tag is None or not str(tag).strip():
            return cls(ToolKind.NONE, None)
        tag = str(tag).strip()
        if tag == Tools.DELETE:
            return cls(ToolKind.DELETE, tag)
        if tag == Tools.CALIBRATE:
            return cls(ToolKind.MOVE_ONLY, tag)
        return cls(ToolKind.CREATE, tag)

    @property
    def creates_markers(self) -> bool:
        return self.kind is ToolKind.CREATE

    @property
    def deletes_markers(self) -> bool:
        return self.kind is ToolKind.DELETE
