import json
import sys

from fastapi.testclient import TestClient

from fxwidget.core.config import Settings
from fxwidget.main import create_app

"""Smoke test for provider switching.
Converts the same amount under the 'static' provider and under a network
provider, showing differing rates or the generic failure message when offline.
"""


def run(network_kind: str = "exchangerate-host"):
    results = {}
    for kind in ("static", network_kind):
        settings = Settings(store_backend="memory", exchange_rate_provider=kind)
        client = TestClient(create_app(settings_override=settings))
        resp = client.get("/api/convert", params={"from": "USD", "to": "BRL", "amount": "100"})
        results[kind] = {"status": resp.status_code, "body": resp.json()}
    print(json.dumps(results, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    run(*sys.argv[1:2])
