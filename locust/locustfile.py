"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags browse    # Listing throughput (full table scan)
  locust -f locustfile.py --tags create    # Event creation incl. image processing
  locust -f locustfile.py --tags edge      # Bad uploads and auth failures
  locust -f locustfile.py                  # All tests

Creation needs an admin refresh token. Either export EVENTHUB_ADMIN_TOKEN or
run with the same SECRET_KEY as the server so one can be minted here.
"""

import io
import json
import os
import random
import string
import uuid

from locust import HttpUser, task, between, tag, events
from PIL import Image

API_HEADERS = {"X-Requested-With": "XMLHttpRequest"}
CATEGORY_NAMES = ["Premium", "Standard", "Economy"]


def admin_token() -> str:
    token = os.environ.get("EVENTHUB_ADMIN_TOKEN")
    if token:
        return token
    from eventhub.core.security import create_refresh_token
    return create_refresh_token("loadtest@example.com", "admin")


def random_title() -> str:
    return "Load Event " + "".join(random.choices(string.ascii_uppercase, k=6)) + uuid.uuid4().hex[:6]


def poster_bytes(size=(320, 180)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=tuple(random.randrange(256) for _ in range(3))).save(buf, "JPEG")
    return buf.getvalue()


def event_payload(title: str, n_categories: int = 3, n_dates: int = 4):
    categories = [
        {"name": name, "price": str(random.randint(20, 400))}
        for name in CATEGORY_NAMES[:n_categories]
    ]
    dates = [
        {"event_date": f"2027-03-{day:02d}", "start_time": "19:00", "end_time": "22:00"}
        for day in range(1, n_dates + 1)
    ]
    return {
        "title": title,
        "description": "Generated by locust",
        "location": "Load Arena",
        "categories": json.dumps(categories),
        "dates": json.dumps(dates),
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("EventHub load test against", environment.host)
    print("=" * 60)


class BrowseUser(HttpUser):
    """
    TEST 1: Listing throughput

    Run: locust -f locustfile.py --tags browse -u 200 -r 50 --run-time 60s

    The list endpoint has no pagination, so latency grows with the number
    of events. Run it again after the create scenario to see the effect.
    """
    wait_time = between(0.1, 0.5)
    weight = 5

    @tag("browse")
    @task
    def list_events(self):
        with self.client.get("/api/events", headers=API_HEADERS, catch_response=True) as resp:
            if resp.status_code == 200 and resp.json().get("success"):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ManagerUser(HttpUser):
    """
    TEST 2: Event creation

    Run: locust -f locustfile.py --tags create -u 20 -r 5 --run-time 60s

    After test, verify every event is complete:
      SELECT e.event_id FROM events e
      JOIN seat_categories sc ON sc.event_id = e.event_id
      JOIN event_dates ed ON ed.event_id = e.event_id
      LEFT JOIN available_seats a
        ON a.seat_category_id = sc.seat_category_id AND a.event_date_id = ed.event_date_id
      WHERE a.available_seats IS NULL;
    Should return no rows.
    """
    wait_time = between(0.5, 2)
    weight = 1

    def on_start(self):
        self.client.cookies.set("refresh_token", admin_token())
        self.poster = poster_bytes()

    @tag("create")
    @task(5)
    def create_event(self):
        files = {"picture": ("poster.jpg", self.poster, "image/jpeg")}
        with self.client.post(
            "/api/events",
            data=event_payload(random_title()),
            files=files,
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code} {resp.text[:100]}")

    @tag("create")
    @task(1)
    def create_same_title_twice(self):
        """Both requests race the duplicate check; exactly one may win."""
        title = random_title()
        for _ in range(2):
            files = {"picture": ("poster.jpg", self.poster, "image/jpeg")}
            with self.client.post(
                "/api/events",
                data=event_payload(title),
                files=files,
                name="/api/events [duplicate]",
                catch_response=True,
            ) as resp:
                if resp.status_code in (200, 400):
                    resp.success()
                else:
                    resp.failure(f"Unexpected: {resp.status_code}")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Bad input

    Run: locust -f locustfile.py --tags edge -u 20 -r 10 --run-time 30s

    Every request here must be refused with 4xx, never 500.
    """
    wait_time = between(0.2, 1)
    weight = 1

    def _expect(self, resp, status):
        if resp.status_code == status:
            resp.success()
        else:
            resp.failure(f"Expected {status}, got {resp.status_code}")

    @tag("edge")
    @task
    def create_without_token(self):
        self.client.cookies.clear()
        with self.client.post(
            "/api/events", data=event_payload(random_title()),
            name="/api/events [no token]", catch_response=True,
        ) as resp:
            self._expect(resp, 401)

    @tag("edge")
    @task
    def create_with_spoofed_image(self):
        self.client.cookies.set("refresh_token", admin_token())
        files = {"picture": ("poster.png", b"#!/bin/sh\necho pwned\n", "image/png")}
        with self.client.post(
            "/api/events", data=event_payload(random_title()), files=files,
            name="/api/events [spoofed]", catch_response=True,
        ) as resp:
            self._expect(resp, 400)

    @tag("edge")
    @task
    def list_without_api_header(self):
        with self.client.get(
            "/api/events", allow_redirects=False,
            name="/api/events [browser]", catch_response=True,
        ) as resp:
            self._expect(resp, 307)
