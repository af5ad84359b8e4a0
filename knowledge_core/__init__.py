"""
Study knowledge retrieval core.

Chunking, indexing, hybrid retrieval and context assembly for study
artifacts (transcripts, slide OCR, Cornell notes, summaries).
"""

__version__ = "0.1.0"
