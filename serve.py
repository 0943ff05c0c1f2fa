#!/usr/bin/env python3
"""
Static server for the idbfuture browser suite.

    python serve.py [port]

then open http://localhost:8000/pages/idb-suite.html
"""

import http.server
import socketserver
import sys

PORT = 8000


class SuiteRequestHandler(http.server.SimpleHTTPRequestHandler):
    """Serves the repo root with the isolation headers Pyodide expects."""

    extensions_map = {
        **http.server.SimpleHTTPRequestHandler.extensions_map,
        ".toml": "text/plain",
        ".py": "text/plain",
    }

    def end_headers(self):
        self.send_header('Cross-Origin-Opener-Policy', 'same-origin')
        self.send_header('Cross-Origin-Embedder-Policy', 'credentialless')
        self.send_header('Cache-Control', 'no-store')
        super().end_headers()


def serve(port=PORT):
    socketserver.TCPServer.allow_reuse_address = True
    with socketserver.TCPServer(("", port), SuiteRequestHandler) as httpd:
        print(f"Serving at http://localhost:{port}/pages/idb-suite.html")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped")


if __name__ == '__main__':
    serve(int(sys.argv[1]) if len(sys.argv) > 1 else PORT)
