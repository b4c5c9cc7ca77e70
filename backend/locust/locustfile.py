"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Race for the last seats
  locust -f locustfile.py --tags throughput   # Route catalog cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

The concurrency scenario shows the difference between seat policies:
with SEAT_POLICY=best_effort the route can end up above max_seats for the
day, with SEAT_POLICY=strict (PostgreSQL) it cannot.
"""

import random
from datetime import date, timedelta
from locust import HttpUser, task, between, tag, events

CONTESTED_ROUTE = "m1"
TRAVEL_DATE = (date.today() + timedelta(days=1)).isoformat()
STATIONS = ["s1", "s2", "s3", "s4", "s5", "s6"]
ROUTE_IDS = []


def random_employee_code():
    return f"L{random.randint(100000, 999999)}"


def login_rider(client):
    """Register a throwaway rider and return auth headers, or {}."""
    code = random_employee_code()
    client.post("/api/v1/auth/register", json={
        "employee_code": code,
        "name": f"Load {code}",
        "department": "QA",
        "phone": "000",
    })
    resp = client.post("/api/v1/auth/login", json={"employee_code": code})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Check seats for {CONTESTED_ROUTE} on {TRAVEL_DATE}:")
    print(f"  GET /api/v1/routes/availability?date={TRAVEL_DATE}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many riders, one route, one day

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings WHERE route_id = 'm1' AND status IN ('WAITING', 'BOOKED');
    Should be <= max_seats under SEAT_POLICY=strict
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = login_rider(self.client)

    @tag("concurrency")
    @task
    def book_contested_route(self):
        if not self.headers:
            return

        with self.client.post("/api/v1/bookings",
            json={"route_id": CONTESTED_ROUTE, "station_id": random.choice(STATIONS), "dates": [TRAVEL_DATE]},
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                # created, duplicate (second try by same rider) or full are all fine
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - route catalog cache

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = login_rider(self.client)

    @tag("throughput", "read")
    @task(10)
    def list_routes_cached(self):
        resp = self.client.get("/api/v1/routes", headers=self.headers, name="/api/v1/routes [cached]")
        if resp.status_code == 200 and not ROUTE_IDS:
            ROUTE_IDS.extend(r["id"] for r in resp.json()["routes"])

    @tag("throughput", "read")
    @task(3)
    def availability(self):
        self.client.get(f"/api/v1/routes/availability?date={TRAVEL_DATE}",
            headers=self.headers, name="/api/v1/routes/availability")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = login_rider(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_route(self):
        with self.client.post("/api/v1/bookings",
            json={"route_id": "nope", "station_id": "s1", "dates": [TRAVEL_DATE]},
            headers=self.headers, catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def date_outside_window(self):
        far = (date.today() + timedelta(days=60)).isoformat()
        with self.client.post("/api/v1/bookings",
            json={"route_id": CONTESTED_ROUTE, "station_id": "s1", "dates": [far]},
            headers=self.headers, catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def no_dates(self):
        with self.client.post("/api/v1/bookings",
            json={"route_id": CONTESTED_ROUTE, "station_id": "s1", "dates": []},
            headers=self.headers, catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/bookings",
            data="not json at all",
            headers=self.headers, catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/v1/bookings",
            json={"route_id": CONTESTED_ROUTE, "station_id": "s1", "dates": [TRAVEL_DATE]},
            catch_response=True
        ) as resp:
            self._expect(resp, [401])

    @tag("edge")
    @task
    def rider_scans(self):
        with self.client.post("/api/v1/checkin/scan",
            json={"code": "ABCDEF123"},
            headers=self.headers, catch_response=True
        ) as resp:
            self._expect(resp, [403])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = login_rider(self.client)

    @task(30)
    def browse_routes(self):
        resp = self.client.get("/api/v1/routes", headers=self.headers)
        if resp.status_code == 200 and not ROUTE_IDS:
            ROUTE_IDS.extend(r["id"] for r in resp.json()["routes"])

    @task(20)
    def news(self):
        self.client.get("/api/v1/news", headers=self.headers)

    @task(10)
    def history(self):
        self.client.get("/api/v1/bookings/me", headers=self.headers)

    @task(5)
    def book_week(self):
        if ROUTE_IDS and self.headers:
            start = date.today()
            days = random.sample(range(7), k=random.randint(1, 3))
            self.client.post("/api/v1/bookings",
                json={
                    "route_id": random.choice(ROUTE_IDS),
                    "station_id": random.choice(STATIONS),
                    "dates": [(start + timedelta(days=d)).isoformat() for d in days],
                },
                headers=self.headers)
