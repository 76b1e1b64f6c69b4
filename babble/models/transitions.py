"""
Transition Table

Counts how often each token follows another in the training corpus.
"""

from types import MappingProxyType

from babble.models.token import BOUNDARY


class TransitionTable:
    """
    Nested counts of observed (last token -> next token) adjacencies.

    Every stored count is at least 1; a destination that was never observed
    is simply absent. Lookups never create entries, so the set of known
    source tokens only grows through `count_transition`.
    """

    def __init__(self):
        self.transitions = {}

    def count_transition(self, last_token, next_token):
        """
        Record one occurrence of `next_token` following `last_token`.

        Args:
            last_token: Source token (Word or Boundary).
            next_token: Destination token (Word or Boundary).
        """
        next_counts = self.transitions.setdefault(last_token, {})
        next_counts[next_token] = next_counts.get(next_token, 0) + 1

    def next_tokens(self, last_token):
        """
        Get the destination counts for a source token.

        Returns:
            Mapping or None: A read-only mapping of next token to count, or
                             None if `last_token` was never seen as a source.
        """
        next_counts = self.transitions.get(last_token)
        if next_counts is None:
            return None
        return MappingProxyType(next_counts)

    def start_tokens(self):
        return self.next_tokens(BOUNDARY)

    def last_tokens(self):
        return iter(self.transitions)

    def count(self, last_token, next_token):
        return self.transitions.get(last_token, {}).get(next_token, 0)

    def is_empty(self):
        return not self.transitions

    def total_transitions(self):
        return sum(sum(next_counts.values())
                   for next_counts in self.transitions.values())

    def unique_transitions(self):
        return sum(len(next_counts) for next_counts in self.transitions.values())

    def to_dict(self):
        return {last_token: dict(next_counts)
                for last_token, next_counts in self.transitions.items()}

    def __len__(self):
        return len(self.transitions)

    def __contains__(self, last_token):
        return last_token in self.transitions

    def __eq__(self, other):
        if isinstance(other, TransitionTable):
            return self.transitions == other.transitions
        if isinstance(other, dict):
            return self.transitions == other
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return (f"TransitionTable(sources={len(self)}, "
                f"transitions={self.total_transitions()})")
