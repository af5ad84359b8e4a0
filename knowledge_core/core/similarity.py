"""
Vector similarity helpers.

Dependencies: math
System role: Semantic scoring for hybrid retrieval
"""

import math
from typing import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector, same length as a

    Returns:
        float: Similarity in [-1.0, 1.0]; 0.0 if either vector has zero norm

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = dot / math.sqrt(norm_a * norm_b)
    # Clamp float drift into [-1, 1]
    return max(-1.0, min(1.0, similarity))
