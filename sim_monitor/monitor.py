"""Main monitoring service for solved problems on SIM."""
import time
import logging
import traceback
import signal

from .errors import AuthError, CorruptStateError, DeliveryError, UpstreamError
from .notifier import NotificationService, PRONOUN_VERBS
from .ranking import RankingClient
from .reconciler import copy_state, find_new_solves, forget_solve, seed_state
from .state_manager import StateManager

logger = logging.getLogger(__name__)


class SolveMonitor:
    """Polls SIM rankings and announces every newly solved problem once."""

    def __init__(self, config):
        """Initialize the monitor with configuration."""
        self.config = config
        self.running = False
        self.session = None
        self.state = None
        self.setup_signal_handlers()

        # Validate required configuration
        self._validate_config()

        # Initialize services
        self.state_manager = StateManager(config.STATE_PATH)
        self.client = RankingClient(
            config.SIM_URL, config.SIM_USERNAME, config.SIM_PASSWORD,
            timeout=config.REQUEST_TIMEOUT)
        self.notifier = NotificationService(config)
        self.pronouns = {user.name: user.pronouns for user in config.TRACKED_USERS}

    def _validate_config(self):
        """Validate that all required configuration is present."""
        missing_vars = []

        if not self.config.SIM_USERNAME:
            missing_vars.append("SIM_USERNAME")
        if not self.config.SIM_PASSWORD:
            missing_vars.append("SIM_PASSWORD")
        if not self.config.DISCORD_TOKEN:
            missing_vars.append("DISCORD_TOKEN")
        if not self.config.DISCORD_CHANNEL_ID:
            missing_vars.append("DISCORD_CHANNEL_ID")
        if not self.config.TRACKED_CONTESTS:
            missing_vars.append("TRACKED_CONTESTS")
        if not self.config.TRACKED_USERS:
            missing_vars.append("TRACKED_USERS")

        if missing_vars:
            error_msg = f"Missing required configuration variables: {', '.join(missing_vars)}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        unknown = [f"{user.name}:{user.pronouns}" for user in self.config.TRACKED_USERS
                   if user.pronouns not in PRONOUN_VERBS]
        if unknown:
            error_msg = f"Unknown pronouns in TRACKED_USERS: {', '.join(unknown)}"
            logger.error(error_msg)
            raise ValueError(error_msg)

    def setup_signal_handlers(self):
        """Set up signal handlers for graceful shutdown."""
        # pylint: disable=unused-argument
        def signal_handler(sig, frame):
            logger.info("Received signal %s, shutting down gracefully...", sig)
            self.running = False

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def initialize(self):
        """Sign in, check the session and load the stored state if there is one."""
        handle = self.client.authenticate()
        if not self.client.verify_session(handle):
            raise AuthError("Fresh session was rejected by SIM")

        if self.state is None and self.state_manager.exists():
            self.state = self.state_manager.load()
        elif self.state is None:
            logger.info("No state file at %s, the first cycle will seed it",
                        self.state_manager.state_path)
        self.session = handle

    def run_cycle(self):
        """Fetch, diff, notify and persist once. Returns the detected SolveEvents.

        Any UpstreamError or AuthError leaves both the stored snapshot and
        the in-memory state untouched.
        """
        users = self.config.TRACKED_USERS
        rankings = {}
        for contest_id in self.config.TRACKED_CONTESTS:
            rankings[contest_id] = self.client.fetch_ranking(self.session, contest_id)

        if self.state is None:
            state = seed_state(rankings, users)
            self.state = state
            self.state_manager.save(state)
            logger.info("Seeded state from %d contest(s) without notifying", len(rankings))
            return []

        metas = {}
        for contest_id in self.config.TRACKED_CONTESTS:
            metas[contest_id] = self.client.fetch_contest_meta(self.session, contest_id)

        working = copy_state(self.state)
        events = []
        for event in find_new_solves(working, rankings, metas, users):
            events.append(event)
            if not self._deliver(event) and self.config.AT_LEAST_ONCE_DELIVERY:
                forget_solve(working, event)

        # In-memory state advances even if the save below fails
        self.state = working
        self.state_manager.save(working)
        logger.info("Cycle finished with %d new solve(s)", len(events))
        return events

    def _deliver(self, event):
        """Notify about one event. Delivery failures are logged, never raised."""
        try:
            self.notifier.notify(
                event.user_name,
                self.pronouns.get(event.user_name),
                event.contest_name,
                event.problem_id,
                event.problem_name,
                event.done,
                event.total)
            return True
        except DeliveryError as e:
            logger.error("Failed to announce problem %s solved by %s: %s",
                         event.problem_id, event.user_name, e)
            return False

    def tick(self):
        """Run one scheduled step, converting failures into a retry on the next tick."""
        try:
            if self.session is None:
                self.initialize()
            self.run_cycle()
        except CorruptStateError:
            raise
        except AuthError as e:
            logger.error("Authentication failed, will sign in again: %s", e)
            self.session = None
        except UpstreamError as e:
            logger.error("Failed to get changes: %s", e)
        except Exception as e:
            logger.error("Unhandled exception in monitoring loop: %s", e)
            logger.debug(traceback.format_exc())

    def run(self):
        """Start the monitoring loop."""
        logger.info(
            "Starting SIM monitor for %s in contests: %s",
            ", ".join(user.name for user in self.config.TRACKED_USERS),
            ", ".join(str(contest_id) for contest_id in self.config.TRACKED_CONTESTS))
        self.running = True

        while self.running:
            try:
                self.tick()

                # Next cycle only starts after this one has settled
                if self.running:
                    time.sleep(self.config.POLLING_INTERVAL)

            except KeyboardInterrupt:
                logger.info("Received keyboard interrupt, shutting down...")
                self.running = False

        logger.info("SIM monitor stopped")
