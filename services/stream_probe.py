import time

import requests
from flask import current_app

DEFAULT_PROBE_TIMEOUT = 2.5  # seconds
HLS_CONTENT_TYPES = ('application/vnd.apple.mpegurl', 'application/x-mpegurl', 'audio/mpegurl')
HLS_MARKER = b'#EXTM3U'
SNIFF_BYTES = 4096
SNIFF_CHUNK = 1  # byte at a time so the deadline is checked between reads


def playback_url_for(concert):
    """Playback URL for a concert: its own stream URL or the deployment-wide one"""
    return concert.stream_url or current_app.config.get('STREAM_PLAYBACK_URL') or None


def probe_availability(playback_url, timeout=None):
    """Check whether the live HLS playlist is being served right now.

    Every call is a fresh request. Any failure reads as "not available";
    this never raises. The body is read against a deadline of `timeout`
    seconds, so a slow origin cannot hold the probe open.
    """
    if not playback_url:
        return False

    if timeout is None:
        timeout = current_app.config.get('STREAM_PROBE_TIMEOUT', DEFAULT_PROBE_TIMEOUT)
    deadline = time.monotonic() + timeout

    try:
        with requests.get(playback_url, headers={'Cache-Control': 'no-cache'},
                          timeout=timeout, stream=True) as response:
            if not 200 <= response.status_code < 300:
                print(f"[Probe] {playback_url} answered {response.status_code}")
                return False

            content_type = response.headers.get('Content-Type', '').lower()
            if not any(hls_type in content_type for hls_type in HLS_CONTENT_TYPES):
                print(f"[Probe] {playback_url} is not a playlist ({content_type or 'no content type'})")
                return False

            head = b''
            for chunk in response.iter_content(chunk_size=SNIFF_CHUNK):
                head += chunk
                if HLS_MARKER in head or len(head) >= SNIFF_BYTES:
                    break
                if time.monotonic() > deadline:
                    print(f"[Probe] {playback_url} too slow, gave up after {len(head)} bytes")
                    return False
    except (requests.RequestException, ValueError) as e:
        print(f"[Probe] Error probing {playback_url}: {e}")
        return False

    # The CDN may serve a placeholder before the stream has started
    return HLS_MARKER in head
