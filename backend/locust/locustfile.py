"""
Locust Load Test Suite

The catalog (event, sessions, products, sponsoring member) must exist before
the run; point the test at it with environment variables:
  LOAD_EVENT_ID    - event to register for
  LOAD_MEMBER_ID   - member sponsoring the guests
  LOAD_SESSION_ID  - session the concurrency scenario fights over (optional,
                     defaults to the first upcoming session)

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overselling
  locust -f locustfile.py --tags throughput   # Test listing cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
import string

import requests
from locust import HttpUser, task, between, tag, events

EVENT_ID = int(os.getenv("LOAD_EVENT_ID", "1"))
MEMBER_ID = int(os.getenv("LOAD_MEMBER_ID", "1"))

# Shared state, filled from the session listing at test start
CATALOG = {"sessions": [], "entry": None, "contested_session": None}


def random_email():
    return f"load_{random.randint(10000, 99999)}@test.com"


def random_name():
    return "Guest " + "".join(random.choices(string.ascii_uppercase, k=6))


def entry_selection(session):
    """Adult Entry tuple from a listed session, or None if it sells no entry."""
    for product in session["products"]:
        if product["product_type"] != "Entry":
            continue
        for product_type in product["product_types"]:
            if product_type["product_size"] == "Adult":
                return {
                    "product_id": product["id"],
                    "product_type_id": product_type["id"],
                    "quantity": 1,
                }
    return None


def guest_payload(sessions):
    selections = []
    for session in sessions:
        entry = entry_selection(session)
        if entry:
            selections.append({"session_id": session["id"], "product_selections": [entry]})
    return {
        "guest_name": random_name(),
        "guest_email": random_email(),
        "adults": 1,
        "member_id": MEMBER_ID,
        "event_id": EVENT_ID,
        "session_selections": selections,
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: load the event's sessions and pick the contested one."""
    print("\n" + "=" * 60)
    print(f"SETUP: Loading sessions for event {EVENT_ID}...")
    print("=" * 60)

    if not environment.host:
        return

    resp = requests.get(f"{environment.host}/api/v1/events/{EVENT_ID}/sessions", timeout=10)
    if resp.status_code != 200:
        print(f"\n✗ Could not list sessions: {resp.status_code}\n")
        return

    sessions = resp.json()["sessions"]
    CATALOG["sessions"] = sessions
    wanted = os.getenv("LOAD_SESSION_ID")
    contested = next((s for s in sessions if str(s["id"]) == wanted), None) if wanted else None
    CATALOG["contested_session"] = contested or (sessions[0] if sessions else None)
    if CATALOG["contested_session"]:
        s = CATALOG["contested_session"]
        print(f"\n✓ Contested session {s['id']} with {s['available_spots']} spots left\n")


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 guests → one small session

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT SUM(l.quantity) FROM order_lines l JOIN products p ON p.id = l.product_id
      WHERE l.session_id = X AND p.product_type = 'Entry';
    Should be ≤ session_balance_capacity
    """
    wait_time = between(0, 0.1)

    @tag("concurrency")
    @task
    def register_for_contested_session(self):
        """All guests fight for the same seats."""
        session = CATALOG["contested_session"]
        if not session:
            return

        with self.client.post("/api/v1/registrations/guest",
            json=guest_payload([session]),
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: session full, or conflict after retries
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Listing cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_sessions_cached(self):
        """Hammer the cached endpoint."""
        self.client.get(f"/api/v1/events/{EVENT_ID}/sessions",
            name="/api/v1/events/{id}/sessions [cached]")

    @tag("throughput", "read")
    @task(3)
    def session_availability(self):
        """Live, uncached availability."""
        if CATALOG["sessions"]:
            session = random.choice(CATALOG["sessions"])
            self.client.get(f"/api/v1/sessions/{session['id']}/availability",
                name="/api/v1/sessions/{id}/availability")

    @tag("throughput")
    @task(1)
    def health_check(self):
        """Monitor system health."""
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Register for a non-existent event."""
        payload = guest_payload(CATALOG["sessions"][:1])
        payload["event_id"] = 999999
        with self.client.post("/api/v1/registrations/guest", json=payload, catch_response=True) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def empty_selection(self):
        """Register without selecting anything."""
        payload = guest_payload([])
        with self.client.post("/api/v1/registrations/guest", json=payload, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def zero_quantity(self):
        """Quantities below one are refused at validation."""
        payload = guest_payload(CATALOG["sessions"][:1])
        for selection in payload["session_selections"]:
            for line in selection["product_selections"]:
                line["quantity"] = 0
        with self.client.post("/api/v1/registrations/guest", json=payload, catch_response=True) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def huge_quantity(self):
        """Try to register an absurd number of seats."""
        payload = guest_payload(CATALOG["sessions"][:1])
        for selection in payload["session_selections"]:
            for line in selection["product_selections"]:
                line["quantity"] = 999
        with self.client.post("/api/v1/registrations/guest", json=payload, catch_response=True) as resp:
            self._expect(resp, [400, 409, 422])

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post("/api/v1/registrations/guest",
            data="not json at all",
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def member_without_auth(self):
        """Member registration without a token."""
        with self.client.post("/api/v1/registrations/member",
            json={"event_id": EVENT_ID, "session_selections": []},
            catch_response=True
        ) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some price quotes
      - Occasional multi-session registrations
    """
    wait_time = between(1, 3)

    def _pick_sessions(self):
        sessions = CATALOG["sessions"]
        if not sessions:
            return []
        return random.sample(sessions, random.randint(1, len(sessions)))

    @task(50)
    def browse_sessions(self):
        """Most common: browsing."""
        self.client.get(f"/api/v1/events/{EVENT_ID}/sessions")

    @task(20)
    def quote(self):
        """Price a selection before committing."""
        sessions = self._pick_sessions()
        if sessions:
            payload = guest_payload(sessions)
            self.client.post("/api/v1/registrations/quote",
                json={"event_id": EVENT_ID, "session_selections": payload["session_selections"]})

    @task(5)
    def register(self):
        """Occasional registration."""
        sessions = self._pick_sessions()
        if sessions:
            self.client.post("/api/v1/registrations/guest", json=guest_payload(sessions))
