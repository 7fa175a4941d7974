"""
Grouping of subtitle blocks into size-bounded chunks for service dispatch.
"""

import logging

from .models import Block, Chunk

logger = logging.getLogger("romanizer")

DEFAULT_MAX_CHUNK_SIZE = 50


def assemble_chunks(blocks: list[Block], max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[Chunk]:
    """
    Partition blocks into consecutive chunks of at most ``max_chunk_size`` blocks.

    Order is preserved, chunks neither overlap nor leave gaps, and only the last
    chunk may be smaller than the bound. No blocks gives no chunks.
    """
    if max_chunk_size < 1:
        raise ValueError(f"max_chunk_size must be >= 1, got {max_chunk_size}")

    chunks: list[Chunk] = []
    for i in range(0, len(blocks), max_chunk_size):
        chunks.append(Chunk(index=len(chunks), blocks=tuple(blocks[i : i + max_chunk_size])))

    logger.debug(
        f"Packed {len(blocks)} blocks into {len(chunks)} chunk(s) "
        f"(max {max_chunk_size} blocks per chunk)"
    )
    return chunks

