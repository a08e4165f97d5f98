import time

import requests

READ_CHUNK_BYTES = 8192


def read_within_deadline(r: requests.Response, deadline: float) -> bytes:
    """
    Reads a streamed response body, giving up once time.monotonic()
    passes ``deadline``. The requests timeout only bounds each socket
    read, so a server trickling bytes would otherwise hold the call open.
    """
    chunks = []
    for chunk in r.iter_content(chunk_size=READ_CHUNK_BYTES):
        if time.monotonic() > deadline:
            r.close()
            raise requests.Timeout("response body not received before the deadline")
        chunks.append(chunk)
    return b"".join(chunks)
