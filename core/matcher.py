"""
Nearest-neighbour face matching against the enrolled roster
"""
from dataclasses import dataclass

import numpy as np

from config import thresholds
from core.models import UNKNOWN


@dataclass
class MatchResult:
    label: str
    distance: float

    @property
    def is_known(self):
        return self.label != UNKNOWN


class FaceMatcher:
    """Euclidean nearest-neighbour matcher over every stored embedding"""

    def __init__(self, labeled, threshold=None):
        self.threshold = thresholds.MATCH_THRESHOLD if threshold is None else threshold

        labels = []
        vectors = []
        for entry in labeled:
            for emb in entry.embeddings:
                labels.append(entry.identity)
                vectors.append(np.asarray(emb, dtype=np.float64).ravel())

        if vectors and len({v.shape for v in vectors}) != 1:
            raise ValueError("Roster embeddings have inconsistent dimensions")

        self.labels = labels
        self.matrix = np.vstack(vectors) if vectors else None

    def find_best_match(self, query) -> MatchResult:
        """
        Find the closest stored embedding

        Returns:
            MatchResult with the owning identity, or 'unknown' when the
            roster is empty or the closest distance exceeds the threshold
        """
        if self.matrix is None:
            return MatchResult(UNKNOWN, float('inf'))

        query = np.asarray(query, dtype=np.float64).ravel()
        if query.shape[0] != self.matrix.shape[1]:
            raise ValueError(
                f"Query has {query.shape[0]} dimensions, roster has {self.matrix.shape[1]}"
            )

        distances = np.linalg.norm(self.matrix - query, axis=1)
        # argmin returns the first minimum on ties
        best = int(np.argmin(distances))
        distance = float(distances[best])

        if distance <= self.threshold:
            return MatchResult(self.labels[best], distance)
        return MatchResult(UNKNOWN, distance)


def match(query, labeled, threshold=None):
    """Return the best-matching identity or 'unknown'"""
    return FaceMatcher(labeled, threshold).find_best_match(query).label
