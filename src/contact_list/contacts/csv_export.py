"""
CSV rendering of the contact list.

Rows are encoded in memory and yielded chunk by chunk so the export
never touches the filesystem.
"""

import csv
import io
from collections.abc import Iterable, Iterator

from fastapi.responses import StreamingResponse

from contact_list.contacts.repository import ContactRecord

CSV_HEADER = ["ID", "Name", "Image", "Phone Numbers"]
CSV_MEDIA_TYPE = "text/csv"

# Rows buffered before a chunk is flushed to the response
CHUNK_ROWS = 500


def contact_to_row(contact: ContactRecord) -> list[str | int]:
    """Map a contact onto the fixed export column order."""
    return [
        contact.id,
        contact.name,
        contact.image or "",
        contact.phone_numbers,
    ]


def iter_contacts_csv(contacts: Iterable[ContactRecord]) -> Iterator[str]:
    """Yield CSV text for the header and every contact.

    Quoting follows the ``csv`` module's minimal policy: fields holding a
    delimiter, quote or line break are quoted and quotes are doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(CSV_HEADER)
    pending = 0
    for contact in contacts:
        writer.writerow(contact_to_row(contact))
        pending += 1
        if pending >= CHUNK_ROWS:
            yield buffer.getvalue()
            buffer.seek(0)
            buffer.truncate(0)
            pending = 0

    remainder = buffer.getvalue()
    if remainder:
        yield remainder


def render_contacts_csv(contacts: Iterable[ContactRecord]) -> str:
    """Render the whole export as a single string."""
    return "".join(iter_contacts_csv(contacts))


def csv_attachment_response(chunks: Iterator[str], filename: str) -> StreamingResponse:
    """Wrap CSV chunks in a downloadable attachment response."""
    return StreamingResponse(
        chunks,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
