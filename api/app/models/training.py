"""Shared training data models for Hacker News AMA threads."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

CommentId = Union[int, str]


@dataclass
class Comment:
    """One node in a thread's reply tree.

    Deleted comments usually have neither author nor text, but their
    replies are kept so they can still be traversed.
    """

    id: Optional[CommentId]
    author: Optional[str] = None
    text: Optional[str] = None
    parent_id: Optional[CommentId] = None
    created_at: Optional[str] = None
    deleted: bool = False
    children: List[Optional["Comment"]] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return isinstance(self.text, str) and bool(self.text.strip())


@dataclass
class Thread:
    """A discussion tree rooted at a single story."""

    id: Optional[CommentId]
    title: str
    root: Comment


@dataclass(frozen=True)
class QAPair:
    """A question-answer pair extracted from an AMA thread."""

    question: str
    answer: str
    timestamp: Optional[str]
    thread_id: Optional[CommentId]
    thread_title: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
