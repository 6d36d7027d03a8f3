"""State manager for the solved problems snapshot."""
import json
import os
import logging

from .errors import CorruptStateError

logger = logging.getLogger(__name__)


class StateManager:
    """Manages the persistent snapshot of solved problems.

    In memory the state is ``{contest_id: {user_name: set(problem_ids)}}``.
    On disk it is a JSON list of ``{"contestId", "data": [{"name", "problems"}]}``.
    """

    def __init__(self, state_path):
        """Initialize the state manager with the path to the JSON file."""
        self.state_path = state_path
        self._ensure_state_directory()

    def _ensure_state_directory(self):
        """Ensure the directory for the state file exists."""
        state_dir = os.path.dirname(self.state_path)
        if state_dir and not os.path.exists(state_dir):
            os.makedirs(state_dir)
            logger.info("Created directory for state file: %s", state_dir)

    def exists(self):
        """Check whether a snapshot was saved before."""
        return os.path.exists(self.state_path)

    def load(self):
        """Read the snapshot, raising CorruptStateError if it has the wrong shape."""
        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except ValueError as e:
            raise CorruptStateError(f"State file {self.state_path} is not valid JSON: {e}") from e
        except OSError as e:
            raise CorruptStateError(f"Cannot read state file {self.state_path}: {e}") from e

        state = decode_state(raw)
        logger.info("Loaded state for %d contest(s) from %s", len(state), self.state_path)
        return state

    def save(self, state):
        """Write the full snapshot, replacing the previous one atomically."""
        tmp_path = self.state_path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(encode_state(state), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.state_path)
        except Exception as e:
            logger.error("Error saving state: %s", e)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.info("Saved state for %d contest(s)", len(state))


def encode_state(state):
    """Convert the in-memory state into its JSON shape."""
    return [
        {
            "contestId": contest_id,
            "data": [
                {"name": name, "problems": sorted(problems)}
                for name, problems in sorted(users.items())
            ],
        }
        for contest_id, users in sorted(state.items())
    ]


def _require(record, key, kind, where):
    if not isinstance(record, dict) or key not in record:
        raise CorruptStateError(f"Missing '{key}' in {where}")
    value = record[key]
    if not isinstance(value, kind) or isinstance(value, bool):
        raise CorruptStateError(f"'{key}' in {where} has type {type(value).__name__}")
    return value


def decode_state(raw):
    """Convert the JSON shape back into the in-memory state.

    Unknown fields are ignored; missing or mistyped required fields are not.
    """
    if not isinstance(raw, list):
        raise CorruptStateError("State file root is not a list")

    state = {}
    for index, contest in enumerate(raw):
        where = f"contest entry {index}"
        contest_id = _require(contest, "contestId", int, where)
        users = state.setdefault(contest_id, {})
        for user_index, user in enumerate(_require(contest, "data", list, where)):
            user_where = f"{where}, user entry {user_index}"
            name = _require(user, "name", str, user_where)
            problems = _require(user, "problems", list, user_where)
            for problem in problems:
                if not isinstance(problem, int) or isinstance(problem, bool):
                    raise CorruptStateError(f"Non-integer problem id {problem!r} in {user_where}")
            users.setdefault(name, set()).update(problems)
    return state
