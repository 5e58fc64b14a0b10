"""Split story text into slide-sized chunks.

Paragraphs are grouped greedily by character budget:
- soft_max: preferred maximum per slide
- floor: a chunk shorter than this keeps absorbing paragraphs
- hard_max: absolute maximum, never exceeded

Paragraphs that are too long on their own are split at sentence
boundaries. Chunk length is the sum of its paragraph lengths; the
blank-line separators do not count.
"""

from __future__ import annotations

import re
import textwrap

from ..constants import (
    BRANDING_SLIDE_SLOTS,
    CHUNK_FLOOR,
    CHUNK_HARD_MAX,
    CHUNK_SOFT_MAX,
    INSTAGRAM_CAROUSEL_MAX_SLIDES,
    TITLE_SLIDE_SLOTS,
)

PARAGRAPH_SEPARATOR = "\n\n"

_BLANK_LINE = re.compile(r"\n\s*\n")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


def content_slide_budget(has_original: bool) -> int:
    """Number of content slides available for a story.

    One slot goes to the title slide, one to the optional original
    image, and one is reserved for the branding slide.
    """
    reserved = TITLE_SLIDE_SLOTS + (1 if has_original else 0) + BRANDING_SLIDE_SLOTS
    return max(0, INSTAGRAM_CAROUSEL_MAX_SLIDES - reserved)


def is_title_marker(paragraph: str) -> bool:
    """Structural title paragraphs are not story content."""
    return "**Title:" in paragraph or paragraph.startswith("Title:")


class ContentChunker:
    """Greedy paragraph chunker with sentence-level splitting.

    Usage:
        chunker = ContentChunker()
        chunks = chunker.chunk(story.body, max_chunks=8)
    """

    def __init__(
        self,
        soft_max: int = CHUNK_SOFT_MAX,
        floor: int = CHUNK_FLOOR,
        hard_max: int = CHUNK_HARD_MAX,
    ):
        if not 0 < floor < soft_max <= hard_max:
            raise ValueError(
                f"Invalid chunk budgets: floor={floor} soft_max={soft_max} hard_max={hard_max}"
            )
        self.soft_max = soft_max
        self.floor = floor
        self.hard_max = hard_max

    def split_paragraphs(self, text: str) -> list[str]:
        """Split on blank lines, dropping empty and title paragraphs."""
        if not text:
            return []
        paragraphs = [p.strip() for p in _BLANK_LINE.split(text)]
        return [p for p in paragraphs if p and not is_title_marker(p)]

    def chunk(self, text: str, max_chunks: int | None = None) -> list[str]:
        """Group paragraphs into slide-sized chunks.

        Args:
            text: Story body.
            max_chunks: Keep at most this many chunks. Extra chunks are
                dropped silently.

        Returns:
            Chunk texts in reading order.
        """
        chunks: list[str] = []
        current: list[str] = []
        current_length = 0

        for paragraph in self.split_paragraphs(text):
            if len(paragraph) > self.soft_max:
                if current:
                    chunks.append(PARAGRAPH_SEPARATOR.join(current))
                    current, current_length = [], 0
                chunks.extend(self._split_long_paragraph(paragraph))
                continue

            merged_length = current_length + len(paragraph)
            if not current or merged_length <= self.soft_max:
                current.append(paragraph)
                current_length = merged_length
            elif current_length <= self.floor and merged_length <= self.hard_max:
                # Under-floor chunk absorbs past soft_max
                current.append(paragraph)
                current_length = merged_length
            else:
                chunks.append(PARAGRAPH_SEPARATOR.join(current))
                current, current_length = [paragraph], len(paragraph)

        if current:
            chunks.append(PARAGRAPH_SEPARATOR.join(current))

        if max_chunks is not None:
            chunks = chunks[:max(0, max_chunks)]
        return chunks

    def _split_long_paragraph(self, paragraph: str) -> list[str]:
        """Split a paragraph at sentence boundaries, regrouped under soft_max."""
        pieces: list[str] = []
        for sentence in _SENTENCE.findall(paragraph):
            sentence = sentence.strip()
            if not sentence:
                continue
            if len(sentence) > self.soft_max:
                pieces.extend(textwrap.wrap(sentence, self.soft_max))
            else:
                pieces.append(sentence)

        chunks: list[str] = []
        current = ""
        for piece in pieces:
            if not current:
                current = piece
            elif len(current) + 1 + len(piece) <= self.soft_max:
                current = f"{current} {piece}"
            else:
                chunks.append(current)
                current = piece
        if current:
            chunks.append(current)
        return chunks
