"""Sample access log for trying out the analyzer."""

from pathlib import Path


SAMPLE_APACHE_LINES = [
    '192.168.1.100 - - [25/Dec/2023:10:00:01 +0000] "GET /index.html HTTP/1.1" 200 1024',
    '10.0.0.5 - - [25/Dec/2023:10:00:02 +0000] "POST /login HTTP/1.1" 200 512',
    '203.0.113.1 - - [25/Dec/2023:10:00:03 +0000] "GET /admin/../../../etc/passwd HTTP/1.1" 404 0',
    '192.168.1.100 - - [25/Dec/2023:10:00:04 +0000] "GET /products HTTP/1.1" 200 2048',
    '198.51.100.1 - - [25/Dec/2023:10:00:05 +0000] "GET /search?q=<script>alert(1)</script> HTTP/1.1" 400 0',
]


def write_sample_log(path: str | Path = 'sample.log') -> Path:
    """Write a small Apache access log with a couple of attack probes."""
    target = Path(path)
    target.write_text('\n'.join(SAMPLE_APACHE_LINES) + '\n', encoding='utf-8')
    return target
