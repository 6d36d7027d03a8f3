"""Diffing of freshly fetched rankings against the stored snapshot."""
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

SolveEvent = namedtuple(
    'SolveEvent',
    'contest_id user_name problem_id problem_name contest_name done total')


def copy_state(state):
    """Return a working copy of the state that can be mutated freely."""
    return {
        contest_id: {name: set(problems) for name, problems in users.items()}
        for contest_id, users in state.items()
    }


def seed_state(rankings, users):
    """Build a state from the first live fetch, without producing any events."""
    state = {}
    for contest_id, ranking in rankings.items():
        contest_state = state.setdefault(contest_id, {})
        for user in users:
            if user.name in ranking:
                contest_state[user.name] = set(ranking[user.name])
    return state


def find_new_solves(state, rankings, metas, users):
    """Yield a SolveEvent for every tracked solve missing from ``state``.

    ``state`` is updated in place before each event is yielded, so ``done``
    already counts the problem the event is about. Contests are visited in
    the order of ``rankings``, users in configuration order and problems in
    ranking order. Users absent from a ranking are skipped.
    """
    for contest_id, ranking in rankings.items():
        meta = metas[contest_id]
        contest_state = state.setdefault(contest_id, {})
        for user in users:
            solved = ranking.get(user.name)
            if solved is None:
                continue
            known = contest_state.setdefault(user.name, set())
            for problem_id in solved:
                if problem_id in known:
                    continue
                known.add(problem_id)
                logger.debug("New solve: %s solved %s in contest %s",
                             user.name, problem_id, contest_id)
                yield SolveEvent(
                    contest_id=contest_id,
                    user_name=user.name,
                    problem_id=problem_id,
                    problem_name=meta.problems.get(problem_id, f"#{problem_id}"),
                    contest_name=meta.name,
                    done=len(known),
                    total=len(meta.problems),
                )


def forget_solve(state, event):
    """Drop the problem of ``event`` from ``state`` so a later cycle sees it again."""
    state.get(event.contest_id, {}).get(event.user_name, set()).discard(event.problem_id)
