"""
HTTP client for the QuizHub REST API

Every call unwraps the response envelope and returns ``data``; a response
with ``success: false`` (or no envelope at all) raises ApiError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-success response from the API"""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(f"{status_code} {message}")


class QuizHubClient:
    """
    Thin wrapper around ``httpx.Client``.

    Pass ``base_url`` to talk to a running server, or an existing
    ``httpx.Client`` (e.g. FastAPI's TestClient) as ``http``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        token: Optional[str] = None,
        api_prefix: str = "/api",
        timeout: float = 10.0,
    ):
        if http is None and base_url is None:
            raise ValueError("base_url or http is required")
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.api_prefix = api_prefix.rstrip("/")
        self.token = token
        self.user: Optional[Dict[str, Any]] = None

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # Transport

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(self, method: str, path: str, *, prefix: Optional[str] = None, **kwargs) -> Any:
        url = f"{self.api_prefix if prefix is None else prefix}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        response = self.http.request(method, url, headers=headers, **kwargs)

        try:
            body = response.json()
        except ValueError:
            raise ApiError(response.status_code, response.text or response.reason_phrase)

        if not isinstance(body, dict) or not body.get("success") or response.is_error:
            error = body.get("error", {}) if isinstance(body, dict) else {}
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiError(
                response.status_code,
                message or response.reason_phrase,
                code=error.get("code"),
                details=error.get("details"),
            )
        return body.get("data")

    # Account

    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self.request("POST", "/users/login", json={"username": username, "password": password})
        self.token = data["token"]
        self.user = data["user"]
        return self.user

    def profile(self) -> Dict[str, Any]:
        return self.request("GET", "/users/profile")

    # Catalog

    def list_question_sets(self, page: int = 1, limit: int = 100, **filters) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, **{k: v for k, v in filters.items() if v is not None}}
        return self.request("GET", "/question-sets", params=params)

    def all_question_sets(self, **filters) -> List[Dict[str, Any]]:
        """Every page of the catalog"""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            result = self.list_question_sets(page=page, **filters)
            items.extend(result["items"])
            if page >= result["totalPages"]:
                return items
            page += 1

    def get_question_set(self, question_set_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/question-sets/{question_set_id}")

    def get_questions(self, question_set_id: str) -> List[Dict[str, Any]]:
        return self.request("GET", f"/question-sets/{question_set_id}/questions")

    # Access

    def check_access(self, question_set_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/purchases/check/{question_set_id}")

    def redeem(self, code: str) -> Dict[str, Any]:
        return self.request("POST", "/redeem-codes/redeem", json={"code": code})

    # Progress

    def record_progress(
        self, question_set_id: str, question_id: str, is_correct: bool, time_spent: int = 0
    ) -> Dict[str, Any]:
        payload = {
            "questionSetId": question_set_id,
            "questionId": question_id,
            "isCorrect": is_correct,
            "timeSpent": time_spent,
        }
        return self.request("POST", "/user-progress", json=payload)

    def submit_quiz(
        self, question_set_id: str, answers: Dict[str, List[str]], time_spent: int = 0
    ) -> Dict[str, Any]:
        payload = {"questionSetId": question_set_id, "answers": answers, "timeSpent": time_spent}
        return self.request("POST", "/quiz/submit", json=payload)

    # Notifier (polling transport)

    def open_polling(self) -> Dict[str, Any]:
        return self.request("POST", "/polling", prefix="/socket")

    def authenticate_polling(self, sid: str) -> Dict[str, Any]:
        return self.request("POST", f"/polling/{sid}/authenticate", prefix="/socket", json={"token": self.token})

    def poll(self, sid: str, timeout: float = 0) -> List[Dict[str, Any]]:
        data = self.request("GET", f"/polling/{sid}", prefix="/socket", params={"timeout": timeout})
        return data["events"]

    def close_polling(self, sid: str) -> None:
        self.request("DELETE", f"/polling/{sid}", prefix="/socket")
