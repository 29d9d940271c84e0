"""Question/answer extraction from Hacker News AMA comment trees.

A pair is emitted whenever the target author (matched case-insensitively
against a small alias set) replies to a comment written by somebody else.
The parent comment becomes the question and the reply becomes the answer.

Both parsing and traversal use explicit stacks, so arbitrarily deep threads
never hit the interpreter's recursion limit.
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional

from app.models.training import Comment, CommentId, QAPair, Thread

logger = logging.getLogger(__name__)

DEFAULT_TARGET_ALIASES = ("peter roberts", "proberts")
DEFAULT_DEDUP_KEY_LENGTH = 50

_ENTITIES = {
    "&quot;": '"',
    "&apos;": "'",
    "&#x27;": "'",
    "&lt;": "<",
    "&gt;": ">",
    "&#x2f;": "/",
    "&#x60;": "`",
    "&#x3d;": "=",
    "&amp;": "&",
}
_ENTITY_RE = re.compile(r"&(?:quot|apos|lt|gt|amp|#[xX](?:27|2[fF]|60|3[dD]));")


class ExtractionIssue(Enum):
    """Anomalies that make a candidate contribute no pair.

    These are reported through debug logging only and never raised.
    """

    MALFORMED_INPUT = "malformed_input"
    MISSING_PARENT = "missing_parent"


def normalize_aliases(aliases: Iterable[str]) -> FrozenSet[str]:
    """Lowercase and trim aliases, dropping empty entries."""
    return frozenset(a.strip().lower() for a in aliases if a and a.strip())


def is_target_author(author: Optional[str], aliases: FrozenSet[str]) -> bool:
    if not isinstance(author, str):
        return False
    return author.strip().lower() in aliases


def decode_html_entities(text: str) -> str:
    """Replace the entity references Hacker News emits with literal characters.

    Only the entities in ``_ENTITIES`` are decoded; anything else (``&nbsp;``,
    legacy references without a semicolon) is left as is. Decoding is a single
    pass, so ``&amp;quot;`` becomes ``&quot;`` and is never unescaped twice.
    """
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0).lower()], text)


def _typed_field(data: Dict[str, Any], key: str, types: tuple) -> Any:
    """Return ``data[key]`` if it has an accepted type, else None.

    ``bool`` is rejected even where ``int`` is accepted.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, types):
        logger.debug(
            f"{ExtractionIssue.MALFORMED_INPUT.value}: ignoring {key} of type "
            f"{type(value).__name__} on comment {data.get('id')!r}"
        )
        return None
    return value


def _comment_from_dict(data: Dict[str, Any]) -> Comment:
    parent_key = "parent_id" if data.get("parent_id") is not None else "parent"
    return Comment(
        id=_typed_field(data, "id", (int, str)),
        author=_typed_field(data, "author", (str,)),
        text=_typed_field(data, "text", (str,)),
        parent_id=_typed_field(data, parent_key, (int, str)),
        created_at=_typed_field(data, "created_at", (str,)),
        deleted=bool(data.get("deleted", False)),
    )


def parse_thread(data: Any) -> Thread:
    """Build a Thread from a Hacker News ``items`` JSON document.

    Child entries that are not JSON objects are skipped. A document that is
    not an object at all yields an empty thread.
    """
    if not isinstance(data, dict):
        logger.debug(
            f"{ExtractionIssue.MALFORMED_INPUT.value}: thread document is "
            f"{type(data).__name__}, not an object"
        )
        return Thread(id=None, title="", root=Comment(id=None))

    root = _comment_from_dict(data)
    stack = [(root, data.get("children"))]
    while stack:
        node, raw_children = stack.pop()
        if not isinstance(raw_children, list):
            continue
        for raw in raw_children:
            if not isinstance(raw, dict):
                logger.debug(
                    f"{ExtractionIssue.MALFORMED_INPUT.value}: skipping "
                    f"{type(raw).__name__} child of comment {node.id}"
                )
                continue
            child = _comment_from_dict(raw)
            node.children.append(child)
            stack.append((child, raw.get("children")))

    title = data.get("title")
    return Thread(
        id=root.id, title=title if isinstance(title, str) else "", root=root
    )


def iter_comments(root: Comment) -> Iterator[Comment]:
    """Yield ``root`` and its descendants in depth-first pre-order.

    ``None`` children are skipped. Each comment object is yielded at most
    once, even if it appears in the tree more than once.
    """
    seen = set()
    stack = [root]
    while stack:
        comment = stack.pop()
        if comment is None or id(comment) in seen:
            continue
        seen.add(id(comment))
        yield comment
        stack.extend(reversed(comment.children))


def _index_by_id(root: Comment) -> Dict[CommentId, Comment]:
    # First comment in depth-first order wins for a given identifier
    index: Dict[CommentId, Comment] = {}
    for comment in iter_comments(root):
        if comment.id is not None:
            index.setdefault(comment.id, comment)
    return index


class ThreadExtractor:
    """Extracts question/answer pairs answered by the target author."""

    def __init__(self, target_aliases: Iterable[str] = DEFAULT_TARGET_ALIASES):
        self.target_aliases = normalize_aliases(target_aliases)

    def extract(self, thread: Thread) -> List[QAPair]:
        """Return pairs in depth-first visitation order.

        The thread root is never treated as an answer, but it can be the
        question for a top-level reply.
        """
        pairs: List[QAPair] = []
        index = _index_by_id(thread.root)

        for comment in iter_comments(thread.root):
            if comment is thread.root:
                continue
            if not self._is_answer(comment):
                continue

            parent = None
            if comment.parent_id is not None:
                parent = index.get(comment.parent_id)
            if parent is None:
                logger.debug(
                    f"{ExtractionIssue.MISSING_PARENT.value}: comment {comment.id} "
                    f"replies to unknown parent {comment.parent_id}"
                )
                continue
            if parent.deleted or not parent.has_text:
                continue
            if is_target_author(parent.author, self.target_aliases):
                continue

            pairs.append(
                QAPair(
                    question=decode_html_entities(parent.text),
                    answer=decode_html_entities(comment.text),
                    timestamp=comment.created_at,
                    thread_id=thread.id,
                    thread_title=thread.title,
                )
            )

        return pairs

    def _is_answer(self, comment: Comment) -> bool:
        return (
            not comment.deleted
            and comment.has_text
            and is_target_author(comment.author, self.target_aliases)
        )


def deduplicate_pairs(
    pairs: Iterable[QAPair], key_length: int = DEFAULT_DEDUP_KEY_LENGTH
) -> List[QAPair]:
    """Drop pairs whose question starts like an earlier one.

    The key is the lowercased first ``key_length`` characters of the
    question; the first occurrence wins.
    """
    seen = set()
    unique: List[QAPair] = []
    for pair in pairs:
        key = pair.question[:key_length].lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(pair)
    return unique
