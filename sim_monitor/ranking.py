"""Client for the SIM contest ranking API."""
import logging
from collections import namedtuple
import requests

from .errors import AuthError, UpstreamError

logger = logging.getLogger(__name__)

MAX_SCORE = 100

SessionHandle = namedtuple('SessionHandle', 'session csrf_token user_id')
ContestMeta = namedtuple('ContestMeta', 'name problems')


class RankingClient:
    """Fetches session, contest metadata and rankings from SIM.

    Requests are never retried here; a failed call raises and the monitor
    decides when to try again.
    """

    def __init__(self, base_url, username, password, timeout=10):
        """Initialize the client with the SIM base URL and credentials."""
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout

    @staticmethod
    def _cookies(handle):
        return {"session": handle.session, "csrf_token": handle.csrf_token}

    def authenticate(self):
        """Sign in and return a fresh SessionHandle."""
        url = f"{self.base_url}/api/sign_in"
        data = {
            "username": self.username,
            "password": self.password,
            "remember_for_a_month": "true",
        }
        try:
            response = requests.post(
                url, data=data, headers={"x-csrf-token": ""}, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(f"Sign in request failed: {e}") from e

        if response.status_code != 200:
            raise AuthError(
                f"Sign in failed with status {response.status_code}: {response.text}")

        session = response.cookies.get("session")
        csrf_token = response.cookies.get("csrf_token")
        if not session or not csrf_token:
            raise AuthError("Sign in response is missing session cookies")

        try:
            user_id = response.json()["session"]["user_id"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError(f"Cannot parse sign in response: {e}") from e
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthError("Sign in response is missing the user id")

        logger.info("Signed in to SIM as user %s", user_id)
        return SessionHandle(session, csrf_token, user_id)

    def verify_session(self, handle):
        """Return True if the session still authorizes requests."""
        url = f"{self.base_url}/api/user/{handle.user_id}"
        try:
            response = requests.get(
                url, cookies=self._cookies(handle), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Session check request failed: %s", e)
            return False
        if response.status_code != 200:
            logger.warning("Session check failed with status %s", response.status_code)
            return False
        return True

    def _post_contest(self, handle, contest_id, path):
        """POST to a contest endpoint and return the decoded JSON payload."""
        url = f"{self.base_url}/api/contest/c{contest_id}{path}"
        logger.debug("Querying SIM at %s", url)
        try:
            response = requests.post(
                url,
                data={"csrf_token": handle.csrf_token},
                headers={"Accept": "application/json"},
                cookies=self._cookies(handle),
                timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(
                f"Request to {url} failed: {e}", contest_id=contest_id) from e

        if response.status_code in (401, 403):
            raise AuthError(
                f"Session rejected for contest {contest_id} (status {response.status_code})")
        if response.status_code != 200:
            raise UpstreamError(
                f"Status {response.status_code}: {response.text}",
                contest_id=contest_id, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Contest {contest_id} did not respond with JSON",
                contest_id=contest_id, status_code=response.status_code) from e

    def fetch_contest_meta(self, handle, contest_id):
        """Return the contest name and its problem id -> name mapping."""
        payload = self._post_contest(handle, contest_id, "")
        try:
            name = payload[1][1]
            # Rows are [id, round, problem, can_view, label, name]
            problems = {int(row[0]): row[5] for row in payload[3]}
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(
                f"Malformed metadata for contest {contest_id}: {e!r}",
                contest_id=contest_id) from e
        return ContestMeta(name, problems)

    def fetch_ranking(self, handle, contest_id):
        """Return a mapping of user name -> solved problem ids in ranking order."""
        payload = self._post_contest(handle, contest_id, "/ranking")
        ranking = {}
        try:
            for row in payload[1:]:
                solved = []
                # Entries are [id, round, problem, status, score]
                for entry in row[2]:
                    if entry[4] != MAX_SCORE:
                        continue
                    problem_id = int(entry[2])
                    if problem_id not in solved:
                        solved.append(problem_id)
                ranking[row[1]] = solved
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(
                f"Malformed ranking for contest {contest_id}: {e!r}",
                contest_id=contest_id) from e
        return ranking
