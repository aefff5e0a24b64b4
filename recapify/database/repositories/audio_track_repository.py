from typing import Any

from psycopg.rows import dict_row

from recapify.database.connection import get_connection
from recapify.database.models import AudioTrackRecord

_COLUMNS = """
    id, summary_id, document_id, owner_id, title, duration_seconds, file_url,
    file_ref, file_size_bytes, format, voice_id, created_at
"""


def _to_record(row: dict[str, Any]) -> AudioTrackRecord:
    return AudioTrackRecord(
        id=str(row["id"]),
        summary_id=str(row["summary_id"]),
        document_id=str(row["document_id"]),
        owner_id=row["owner_id"],
        title=row["title"],
        duration_seconds=row["duration_seconds"],
        file_url=row["file_url"],
        file_ref=row["file_ref"],
        file_size_bytes=row["file_size_bytes"],
        format=row["format"],
        voice_id=row["voice_id"],
        created_at=row["created_at"],
    )


class AudioTrackRepository:
    """Database operations for the audio_tracks table."""

    def create(self, track: AudioTrackRecord) -> AudioTrackRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO audio_tracks
                    (id, summary_id, document_id, owner_id, title, duration_seconds,
                     file_url, file_ref, file_size_bytes, format, voice_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        track.id,
                        track.summary_id,
                        track.document_id,
                        track.owner_id,
                        track.title,
                        track.duration_seconds,
                        track.file_url,
                        track.file_ref,
                        track.file_size_bytes,
                        track.format,
                        track.voice_id,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of audio track {track.id} returned no row")
        return _to_record(row)

    def find_by_summary_id(self, summary_id: str) -> list[AudioTrackRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM audio_tracks
                    WHERE summary_id = %s
                    ORDER BY created_at
                    """,
                    (summary_id,),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]
