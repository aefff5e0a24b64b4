from dataclasses import dataclass


@dataclass(frozen=True)
class SynthesizedAudio:
    """Concatenated audio for a whole text, in source chunk order."""

    data: bytes
    voice_id: str
    format: str
    chunk_count: int
