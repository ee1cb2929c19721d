"""Decide whether a new partial hypothesis supersedes the previous one.

Live recognizers revise their guess by re-emitting a much shorter partial
after a pause. When the new partial is far shorter than the previous one
and is not a multi-word prefix of it, the previous partial is the finished
utterance and has to be committed before it is overwritten.
"""

from enum import Enum

DEFAULT_REGRESSION_RATIO = 0.5


class HypothesisDecision(Enum):
    """Outcome of comparing two consecutive partial hypotheses."""
    CONTINUE = "continue"
    COMMIT_PREVIOUS = "commit_previous"


def classify_partial(previous: str, current: str,
                     ratio: float = DEFAULT_REGRESSION_RATIO) -> HypothesisDecision:
    """Compare consecutive partials.

    Args:
        previous: Last partial text received
        current: Newly received partial text
        ratio: Fraction of the previous length below which the new partial
            counts as a restart

    Returns:
        COMMIT_PREVIOUS when ``previous`` should be committed as a segment
    """
    if not previous or not current:
        return HypothesisDecision.CONTINUE

    threshold = int(len(previous) * ratio)
    if len(current) >= threshold:
        return HypothesisDecision.CONTINUE

    # Single-word prefixes count as a restart
    if len(current.split()) > 1 and previous.lower().startswith(current.lower()):
        return HypothesisDecision.CONTINUE

    return HypothesisDecision.COMMIT_PREVIOUS
