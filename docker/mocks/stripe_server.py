"""
Stripe Mock Server — answers Checkout session creation for local development.
Run: python stripe_server.py
Listens on port 8002. Point STRIPE_API_BASE_URL at http://localhost:8002.
"""

import json, uuid
from urllib.parse import parse_qs
from http.server import BaseHTTPRequestHandler, HTTPServer


class StripeHandler(BaseHTTPRequestHandler):
    def do_POST(self):
        if self.path == "/v1/checkout/sessions":
            length = int(self.headers.get("Content-Length", 0))
            form   = {k: v[0] for k, v in parse_qs(self.rfile.read(length).decode()).items()}

            if not self.headers.get("Authorization"):
                self._respond(401, {"error": {"message": "No API key provided"}})
                return
            if not form.get("line_items[0][price_data][unit_amount]"):
                self._respond(400, {"error": {"message": "Missing line_items[0][price_data][unit_amount]"}})
                return

            session_id = f"cs_test_{uuid.uuid4().hex[:24]}"
            self._respond(200, {
                "id":                  session_id,
                "object":              "checkout.session",
                "url":                 f"http://localhost:8002/pay/{session_id}",
                "client_reference_id": form.get("client_reference_id"),
                "amount_total":        int(form["line_items[0][price_data][unit_amount]"]),
                "currency":            form.get("line_items[0][price_data][currency]", "eur"),
                "metadata":            {k[9:-1]: v for k, v in form.items() if k.startswith("metadata[")},
            })
        else:
            self._respond(404, {"error": {"message": "Unrecognized request URL"}})

    def _respond(self, code, data):
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def log_message(self, *_):
        pass


if __name__ == "__main__":
    server = HTTPServer(("0.0.0.0", 8002), StripeHandler)
    print("Stripe Mock running on :8002")
    server.serve_forever()
