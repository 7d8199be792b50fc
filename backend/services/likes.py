"""
Like state shared by posts and comments.

A request may carry ``liked``. ``True``/``False`` is the state the caller
wants and is idempotent; ``None`` flips the current state.
"""

from typing import Optional


def desired_like_state(currently_liked: bool, requested: Optional[bool]) -> bool:
    """
    Resolve the like state a request asks for.

    Examples:
        >>> desired_like_state(False, None)
        True
        >>> desired_like_state(True, True)
        True
        >>> desired_like_state(True, None)
        False
    """
    if requested is None:
        return not currently_liked
    return requested
