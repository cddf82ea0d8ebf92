"""Spawn a chain of wrapper processes ending in an HTTP server.

    python chain.py <depth> <port> [--ignore-term]

Each level > 0 launches the next level through the shell (adding a shell
wrapper in between) and then idles. Level 0 serves HTTP on <port>. Killing
any level does not kill its children. With --ignore-term the server ignores
SIGTERM and SIGINT, so only a forceful kill stops it.
"""

import http.server
import signal
import subprocess
import sys
import time


class Handler(http.server.BaseHTTPRequestHandler):

    def do_GET(self):
        body = b"Hello from the end of the chain\n"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


def main(argv):
    depth = int(argv[0])
    port = int(argv[1])
    ignore_term = "--ignore-term" in argv

    if depth > 0:
        command = f'"{sys.executable}" "{__file__}" {depth - 1} {port}'
        if ignore_term:
            command += " --ignore-term"
        subprocess.Popen(command, shell=True)
        while True:
            time.sleep(1)

    if ignore_term:
        signal.signal(signal.SIGTERM, signal.SIG_IGN)
        signal.signal(signal.SIGINT, signal.SIG_IGN)

    server = http.server.HTTPServer(("127.0.0.1", port), Handler)
    server.serve_forever()


if __name__ == "__main__":
    try:
        main(sys.argv[1:])
    except KeyboardInterrupt:
        sys.exit(0)
