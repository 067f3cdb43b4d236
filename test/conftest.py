import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_event(method: str, path: str, body=None, query=None) -> dict:
    return {
        "httpMethod": method,
        "path": path,
        "pathParameters": None,
        "queryStringParameters": query,
        "body": None if body is None else (body if isinstance(body, str) else json.dumps(body)),
    }


def read_body(response: dict) -> dict:
    return json.loads(response["body"])


PRODUCT_A1 = {
    "codigo": "A1",
    "nombre": "Tornillo",
    "cantidad": 10,
    "precio_unitario": 1.25,
    "categoria": "Ferretería",
}
