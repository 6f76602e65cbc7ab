"""JSON REST API over the job store, served with ``http.server``."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable
from urllib.parse import parse_qs, urlparse

from jobtracker.analytics.aggregator import (
    compute_analytics,
    dashboard_summary,
    interview_stats,
    status_overview,
)
from jobtracker.analytics.presenter import present
from jobtracker.exceptions import InvalidRecordError, RecordNotFoundError, StorageError
from jobtracker.models import utcnow
from jobtracker.settings import AppSettings
from jobtracker.storage.repository import JobTrackerStore

logger = logging.getLogger(__name__)

_ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
_ALLOWED_HEADERS = "Content-Type, Authorization, X-Requested-With"
_MAX_BODY = 1 << 20

_ID = r"(?P<record_id>[^/]+)"


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class JobTrackerHandler(BaseHTTPRequestHandler):
    """Request handler; ``store``, ``settings`` and ``clock`` are bound by
    :func:`make_handler`."""

    store: JobTrackerStore
    settings: AppSettings
    clock: Callable[[], datetime] = staticmethod(utcnow)

    server_version = "JobTracker/1.0"

    # ---- routing ----

    def _routes(self) -> list[tuple[str, re.Pattern[str], Callable[..., Any]]]:
        # Literal paths come before their /<id> siblings.
        table = [
            ("GET", r"/", self._root),
            ("GET", r"/health", self._health),
            ("GET", r"/api/jobs", self._list_jobs),
            ("POST", r"/api/jobs", self._create_job),
            ("GET", r"/api/jobs/stats/overview", self._job_stats),
            ("GET", r"/api/jobs/followup/needed", self._follow_up),
            ("GET", r"/api/jobs/analytics", self._analytics),
            ("GET", r"/api/jobs/dashboard", self._dashboard),
            ("GET", rf"/api/jobs/{_ID}", self._get_job),
            ("PUT", rf"/api/jobs/{_ID}", self._update_job),
            ("DELETE", rf"/api/jobs/{_ID}", self._delete_job),
            ("GET", r"/api/interviews", self._list_interviews),
            ("POST", r"/api/interviews", self._create_interview),
            ("GET", r"/api/interviews/calendar/upcoming", self._upcoming),
            ("GET", r"/api/interviews/stats/overview", self._interview_stats),
            ("GET", rf"/api/interviews/job/{_ID}", self._interviews_for_job),
            ("GET", rf"/api/interviews/{_ID}", self._get_interview),
            ("PUT", rf"/api/interviews/{_ID}", self._update_interview),
            ("DELETE", rf"/api/interviews/{_ID}", self._delete_interview),
        ]
        return [(m, re.compile(f"^{p}/?$"), fn) for m, p, fn in table]

    def _dispatch(self, method: str) -> None:
        parsed = urlparse(self.path)
        path = parsed.path
        self._query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
        logger.debug("%s %s", method, self.path)

        path_matched = False
        try:
            for route_method, pattern, handler in self._routes():
                match = pattern.match(path)
                if not match:
                    continue
                path_matched = True
                if route_method != method:
                    continue
                status, payload = handler(**match.groupdict())
                self._json_response(payload, status)
                return
            if path_matched:
                raise ApiError(405, "Method not allowed")
            raise ApiError(404, "Not found")
        except ApiError as exc:
            self._json_response({"error": str(exc)}, exc.status)
        except RecordNotFoundError as exc:
            self._json_response({"error": str(exc)}, 404)
        except InvalidRecordError as exc:
            self._json_response({"error": str(exc)}, 400)
        except StorageError as exc:
            logger.error("Storage failure on %s %s: %s", method, path, exc)
            self._json_response({"error": str(exc)}, 500)
        except Exception:
            logger.exception("Unhandled error on %s %s.", method, path)
            self._json_response({"error": "Something went wrong!"}, 500)

    def do_GET(self):
        self._dispatch("GET")

    def do_POST(self):
        self._dispatch("POST")

    def do_PUT(self):
        self._dispatch("PUT")

    def do_DELETE(self):
        self._dispatch("DELETE")

    def do_OPTIONS(self):
        self.send_response(200)
        self._cors_headers()
        self.send_header("Content-Length", "0")
        self.end_headers()

    # ---- io ----

    def _read_json(self) -> dict[str, Any]:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError as exc:
            raise ApiError(400, "Invalid Content-Length") from exc
        if length < 0:
            raise ApiError(400, "Invalid Content-Length")
        if length > _MAX_BODY:
            raise ApiError(413, "Request body too large")
        raw = self.rfile.read(length) if length else b""
        if not raw:
            return {}
        try:
            body = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ApiError(400, f"Malformed JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise ApiError(400, "Request body must be a JSON object")
        return body

    def _cors_headers(self) -> None:
        origin = self.headers.get("Origin")
        if not origin:
            self.send_header("Access-Control-Allow-Origin", "*")
        elif origin in self.settings.origins():
            self.send_header("Access-Control-Allow-Origin", origin)
            self.send_header("Vary", "Origin")
        self.send_header("Access-Control-Allow-Methods", _ALLOWED_METHODS)
        self.send_header("Access-Control-Allow-Headers", _ALLOWED_HEADERS)
        self.send_header("Access-Control-Allow-Credentials", "true")

    def _json_response(self, data: Any, status: int = 200) -> None:
        body = json.dumps(data, default=str).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self._cors_headers()
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    # ---- service ----

    def _root(self):
        return 200, {
            "message": "JobTracker API Server",
            "status": "Running",
            "endpoints": {
                "jobs": "/api/jobs",
                "interviews": "/api/interviews",
                "health": "/health",
            },
        }

    def _health(self):
        return 200, {"status": "OK", "message": "Server is running"}

    # ---- jobs ----

    def _filtered_jobs(self):
        return self.store.list_jobs(
            status=self._query.get("status", ""),
            company=self._query.get("company", ""),
            resume_version=self._query.get("resumeVersion", ""),
        )

    def _list_jobs(self):
        return 200, [job.to_record() for job in self._filtered_jobs()]

    def _create_job(self):
        job = self.store.create_job(self._read_json())
        return 201, job.to_record()

    def _get_job(self, record_id: str):
        return 200, self.store.get_job(record_id).to_record()

    def _update_job(self, record_id: str):
        return 200, self.store.update_job(record_id, self._read_json()).to_record()

    def _delete_job(self, record_id: str):
        self.store.delete_job(record_id)
        return 200, {"message": "Job deleted successfully"}

    def _job_stats(self):
        return 200, status_overview(self.store.list_jobs())

    def _follow_up(self):
        jobs = self.store.jobs_needing_follow_up(
            self.clock(), self.settings.follow_up_days
        )
        return 200, [job.to_record() for job in jobs]

    def _analytics(self):
        metrics = compute_analytics(self._filtered_jobs())
        return 200, {"metrics": metrics.to_dict(), "display": present(metrics)}

    def _dashboard(self):
        return 200, dashboard_summary(
            self.store.list_jobs(), self.clock(), self.settings.follow_up_days
        )

    # ---- interviews ----

    def _list_interviews(self):
        interviews = self.store.list_interviews(
            job_id=self._query.get("jobId", ""),
            kind=self._query.get("type", ""),
            result=self._query.get("result", ""),
        )
        return 200, [iv.to_record() for iv in interviews]

    def _create_interview(self):
        interview = self.store.create_interview(self._read_json())
        return 201, interview.to_record()

    def _get_interview(self, record_id: str):
        return 200, self.store.get_interview(record_id).to_record()

    def _interviews_for_job(self, record_id: str):
        return 200, [iv.to_record() for iv in self.store.interviews_for_job(record_id)]

    def _update_interview(self, record_id: str):
        return 200, self.store.update_interview(record_id, self._read_json()).to_record()

    def _delete_interview(self, record_id: str):
        self.store.delete_interview(record_id)
        return 200, {"message": "Interview deleted successfully"}

    def _upcoming(self):
        pairs = self.store.upcoming_interviews(self.clock(), self.settings.upcoming_days)
        return 200, [{**iv.to_record(), "job": job.to_record()} for iv, job in pairs]

    def _interview_stats(self):
        return 200, interview_stats(self.store.list_interviews())


def make_handler(
    store: JobTrackerStore,
    settings: AppSettings,
    clock: Callable[[], datetime] = utcnow,
) -> type[JobTrackerHandler]:
    """Bind *store*, *settings* and *clock* onto a handler subclass."""
    return type(
        "BoundJobTrackerHandler",
        (JobTrackerHandler,),
        {"store": store, "settings": settings, "clock": staticmethod(clock)},
    )


def create_server(
    settings: AppSettings,
    store: JobTrackerStore,
    clock: Callable[[], datetime] = utcnow,
) -> HTTPServer:
    return HTTPServer((settings.host, settings.port), make_handler(store, settings, clock))


def serve(settings: AppSettings) -> None:
    """Run the API until interrupted."""
    store = JobTrackerStore(settings.db_path)
    server = create_server(settings, store)
    host, port = server.server_address[:2]
    logger.info("API running at http://%s:%s (db: %s).", host, port, settings.db_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    finally:
        server.server_close()
        store.close()
