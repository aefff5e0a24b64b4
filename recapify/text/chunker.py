BOUNDARY_MARKERS: tuple[str, ...] = (". ", "! ", "? ", "\n\n")


def split_text(text: str, max_chunk_length: int) -> list[str]:
    """Split text into ordered chunks of at most `max_chunk_length` characters.

    Greedy forward scan: each window ends at the last sentence or paragraph
    boundary inside it, or exactly at the limit when the window has none.
    Chunks are whitespace-trimmed; whitespace-only chunks are dropped.

    Raises:
        ValueError: if max_chunk_length is not positive.
    """
    if max_chunk_length <= 0:
        raise ValueError(f"max_chunk_length must be positive, got {max_chunk_length}")

    chunks: list[str] = []
    start = 0
    length = len(text)
    while start < length:
        end = min(start + max_chunk_length, length)
        if end < length:
            boundary = _last_boundary(text, start, end)
            if boundary is not None:
                end = boundary
        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
        start = end
    return chunks


def _last_boundary(text: str, start: int, end: int) -> int | None:
    """Offset just past the right-most boundary marker fully inside text[start:end]."""
    best: int | None = None
    for marker in BOUNDARY_MARKERS:
        pos = text.rfind(marker, start + 1, end)
        if pos == -1:
            continue
        cut = pos + len(marker)
        if best is None or cut > best:
            best = cut
    return best
