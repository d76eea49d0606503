# backend/scripts/smoke_parish_api.py
"""
Smoke test against a running API:
- Log in as the admin
- Submit a Baptism request, schedule it, complete it
- Verify exactly one sacrament record was derived
- Submit a certificate request, issue it, upload a PDF, download it back

Run (server up on :8000, admin seeded):
(.venv) > python backend/scripts/smoke_parish_api.py --password admin
"""

import argparse
from datetime import datetime

import requests

BASE = "http://127.0.0.1:8000"
HEADERS = {}


def req(method, path, ok=200, **kwargs):
    r = requests.request(method, f"{BASE}{path}", headers=HEADERS, **kwargs)
    if r.status_code != ok:
        raise SystemExit(f"{method} {path} -> {r.status_code}: {r.text}")
    if r.headers.get("content-type", "").startswith("application/json"):
        return r.json()
    return r.content


def login(username, password):
    body = req("POST", "/api/auth/login", json={"username": username, "password": password})
    HEADERS["Authorization"] = f"Bearer {body['token']}"
    print(f"logged in as {body['user']['username']}")


def sacrament_flow(stamp):
    name = f"Smoke Baptism {stamp}"
    r = req("POST", "/api/requests", ok=201, json={
        "category": "SACRAMENT",
        "service_type": "Baptism",
        "requester_name": name,
        "contact_info": "smoke@example.com",
        "preferred_date": "2023-12-10",
        "details": "smoke run",
    })
    rid = r["id"]
    req("PATCH", f"/api/requests/{rid}",
        json={"status": "SCHEDULED", "confirmed_schedule": "2023-12-10 10:00 AM"})
    req("PATCH", f"/api/requests/{rid}", json={"status": "COMPLETED"})
    # completing twice must not duplicate
    req("PATCH", f"/api/requests/{rid}", json={"status": "COMPLETED"})

    recs = req("GET", "/api/records", params={"search": name, "type": "BAPTISM"})
    if len(recs) != 1:
        raise SystemExit(f"expected 1 derived record for {name!r}, got {len(recs)}")
    if recs[0]["date"] != "2023-12-10":
        raise SystemExit(f"derived record date is {recs[0]['date']}, expected 2023-12-10")
    print(f"request #{rid} -> record #{recs[0]['id']} OK")


def certificate_flow(stamp):
    r = req("POST", "/api/requests", ok=201, json={
        "category": "CERTIFICATE",
        "service_type": "Baptismal Certificate",
        "requester_name": f"Smoke Cert {stamp}",
        "contact_info": "smoke@example.com",
        "details": "For local employment purposes.",
    })
    rid = r["id"]
    cert = req("POST", f"/api/requests/{rid}/issue-certificate", ok=201,
               json={"delivery_method": "PICKUP", "notes": "smoke"})
    cid = cert["id"]

    status = req("GET", f"/api/requests/{rid}")["status"]
    if status != "COMPLETED":
        raise SystemExit(f"request #{rid} is {status} after issuance")

    req("GET", f"/api/certificates/{cid}/download", ok=404)

    pdf = b"%PDF-1.4\n% smoke\n%%EOF\n"
    req("POST", f"/api/certificates/{cid}/upload",
        files={"file": (f"smoke-{stamp}.pdf", pdf, "application/pdf")})
    got = req("GET", f"/api/certificates/{cid}/download")
    if got != pdf:
        raise SystemExit("downloaded bytes differ from upload")
    print(f"certificate #{cid} issued, uploaded and downloaded OK")


def main():
    global BASE
    p = argparse.ArgumentParser(description="Parish API smoke test")
    p.add_argument("--base", default=BASE)
    p.add_argument("--username", default="admin")
    p.add_argument("--password", default="admin")
    args = p.parse_args()
    BASE = args.base.rstrip("/")

    health = req("GET", "/api/health")
    print(f"health: {health['status']} (db {health['db']['status']})")

    login(args.username, args.password)
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")
    sacrament_flow(stamp)
    certificate_flow(stamp)
    print("ALL OK")


if __name__ == "__main__":
    main()
