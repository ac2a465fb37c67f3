import os
import json
import time
import socket
from statistics import mean, stdev

import click
import requests

from utils import error_text


# ============================== 🧩 WIRE FORMAT 🧩 ==============================
def decode_chunked(body):
    """Split a chunked body into (length, payload) frames, terminator included"""
    frames = []
    pos = 0
    while True:
        line_end = body.find(b"\r\n", pos)
        if line_end < 0:
            raise ValueError(f"missing chunk size line at offset {pos}")

        size_field = body[pos:line_end].split(b";", 1)[0].strip()
        try:
            length = int(size_field, 16)
        except ValueError:
            raise ValueError(f"bad chunk size {size_field!r} at offset {pos}")

        start = line_end + 2
        payload = body[start:start + length]
        if len(payload) != length or body[start + length:start + length + 2] != b"\r\n":
            raise ValueError(f"chunk of {length} bytes at offset {pos} is truncated")

        frames.append((length, payload))
        pos = start + length + 2
        if length == 0:
            return frames


def split_response(raw):
    head, sep, body = raw.partition(b"\r\n\r\n")
    if not sep:
        raise ValueError("response has no header terminator")

    lines = head.decode("iso-8859-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


def fetch_raw(host, port, request_line, timeout=15):
    """Send one request line and return everything the server wrote before closing"""
    with socket.create_connection((host, port), timeout=timeout) as sock:
        sock.sendall(request_line.encode("utf-8") + b"\r\n")
        data = b""
        while True:
            chunk = sock.recv(65536)
            if not chunk:
                break
            data += chunk
    return data


# ============================== 📏 MEASUREMENT 📏 ==============================
def chunked_frames(raw):
    status_line, headers, body = split_response(raw)
    if headers.get("Transfer-Encoding") != "chunked":
        raise ValueError(f"not a chunked response: {status_line}")
    return status_line, headers, body, decode_chunked(body)


def frame_breakdown(raw):
    """Account for every byte of a chunked 200 response: headers, framing, payload"""
    status_line, headers, body, frames = chunked_frames(raw)
    payload_bytes = sum(length for length, _ in frames)
    return {
        "status": status_line,
        "content_type": headers.get("Content-Type"),
        "header_bytes": len(raw) - len(body),
        "framing_bytes": len(body) - payload_bytes,
        "payload_bytes": payload_bytes,
        "chunks": len(frames) - 1,
        "chunk_sizes": [length for length, _ in frames[:-1]],
    }


def spread(values):
    return {
        "mean": mean(values),
        "stddev": stdev(values) if len(values) > 1 else 0.0,
        "min": min(values),
        "max": max(values),
    }


class StaticHTTPClient:
    def __init__(self, server_host, server_port=8000):
        self.server_host = server_host
        self.server_port = server_port

    def timed_fetch(self, path):
        started = time.perf_counter()
        raw = fetch_raw(self.server_host, self.server_port, f"GET {path} HTTP/1.1")
        return raw, time.perf_counter() - started

    def verify(self, path, timeout=15):
        """Check that requests decodes the same bytes the raw frames carry"""
        raw, _ = self.timed_fetch(path)
        frames = chunked_frames(raw)[3]
        expected = b"".join(payload for _, payload in frames)

        url = f"http://{self.server_host}:{self.server_port}{path}"
        response = requests.get(url, headers={'Connection': 'close'}, timeout=timeout)
        response.raise_for_status()
        return response.content == expected

    def benchmark(self, path, repetitions):
        """Fetch path repeatedly; framing is fixed per file, timing varies per run"""
        breakdown = None
        durations = []

        label = click.style(f'GET {path}', fg='bright_green')
        with click.progressbar(range(repetitions), label=label) as runs:
            for _ in runs:
                raw, elapsed = self.timed_fetch(path)
                if breakdown is None:
                    breakdown = frame_breakdown(raw)
                durations.append(elapsed)

        wire_bytes = breakdown["header_bytes"] + breakdown["framing_bytes"] + breakdown["payload_bytes"]
        report = dict(breakdown)
        report.update({
            "path": path,
            "runs": repetitions,
            "wire_bytes": wire_bytes,
            "framing_per_chunk": breakdown["framing_bytes"] / (breakdown["chunks"] + 1),
            "overhead_ratio": wire_bytes / breakdown["payload_bytes"] if breakdown["payload_bytes"] else None,
            "transfer_time": spread(durations),
            "throughput_bps": spread([breakdown["payload_bytes"] * 8 / d for d in durations if d > 0]
                                     or [0.0]),
        })
        return report

    def inspect(self, path):
        """Print the status line, headers and chunk frame sizes of one raw response"""
        raw, _ = self.timed_fetch(path)
        status_line, headers, body = split_response(raw)

        click.echo(click.style(status_line, fg='bright_green', bold=True))
        for name, value in headers.items():
            click.echo(f"{name}: " + click.style(value, fg='magenta'))

        if headers.get("Transfer-Encoding") != "chunked":
            return status_line, headers, []

        frames = decode_chunked(body)
        for length, _ in frames:
            click.echo("chunk " + click.style(f"{length:x}", fg='blue') + f" ({length} bytes)")
        click.echo(f"{sum(length for length, _ in frames)} bytes in {len(frames) - 1} chunks")
        return status_line, headers, frames


def print_report(report):
    click.echo(f"{report['payload_bytes']} payload bytes in {report['chunks']} chunks " +
               click.style(f"{report['chunk_sizes']}", fg='blue'))
    click.echo(f"headers {report['header_bytes']} B, framing {report['framing_bytes']} B " +
               click.style(f"({report['framing_per_chunk']:.1f} B/frame)", fg='magenta'))
    if report['overhead_ratio'] is not None:
        click.echo("wire/payload ratio " + click.style(f"{report['overhead_ratio']:.4f}", fg='magenta'))

    timing = report['transfer_time']
    click.echo(f"transfer time {timing['mean'] * 1000:.3f} ms" +
               click.style(f" (±{timing['stddev'] * 1000:.3f}, "
                           f"{timing['min'] * 1000:.3f}..{timing['max'] * 1000:.3f})", fg='blue'))
    click.echo(f"throughput {report['throughput_bps']['mean'] / 1e6:.2f} Mbit/s")


def save_report(report, host, port, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    name = report["path"].strip("/").replace("/", "_") or "index"
    report_path = os.path.join(output_dir, f"frames_{name}.json")

    with open(report_path, 'w') as f:
        json.dump({"server": f"{host}:{port}", "report": report}, f, indent=2)

    click.echo(click.style(f"Report saved to {report_path}", fg='bright_green', bold=True))
    return report_path


def absolute_path(ctx, param, value):
    return value if value.startswith("/") else "/" + value


# ============================== 🚀 CLI COMMAND 🚀 ==============================
@click.command()
@click.option('--host', default='127.0.0.1', show_default=True, help='Server host')
@click.option('--port', type=int, default=8000, show_default=True, help='Server port')
@click.option('--path', default='/', show_default=True, callback=absolute_path,
              help='Request target to fetch; a leading / is added when missing')
@click.option('--repetitions', type=click.IntRange(min=1), default=10, show_default=True,
              help='Number of timed fetches')
@click.option('--output', type=click.Path(file_okay=False), help='Directory for a JSON report')
@click.option('--raw', is_flag=True, help='Fetch once and list every chunk frame')
def main(host, port, path, repetitions, output, raw):
    """Measure how a static-http server frames a file: headers, chunk framing and timing."""
    client = StaticHTTPClient(host, port)

    try:
        if raw:
            client.inspect(path)
            return

        if not client.verify(path):
            click.echo(error_text(f"requests decoded different bytes for {path}"), err=True)
            raise SystemExit(1)
        report = client.benchmark(path, repetitions)
    except (OSError, ValueError, requests.RequestException) as e:
        click.echo(error_text(f"Fetching {path} failed: {e}"), err=True)
        raise SystemExit(1)

    print_report(report)
    if output:
        save_report(report, host, port, output)


if __name__ == '__main__':
    main()
