"""Tests for sim_monitor.reconciler."""

from sim_monitor.config import TrackedUser
from sim_monitor.ranking import ContestMeta
from sim_monitor.reconciler import (
    SolveEvent,
    copy_state,
    find_new_solves,
    forget_solve,
    seed_state,
)

BOB = TrackedUser('bob', 'he/him')
ALICE = TrackedUser('alice', 'she/her')


def _meta(count=6, names=None, name='Contest'):
    problems = {pid: f'P{pid}' for pid in range(1, count + 1)}
    problems.update(names or {})
    return ContestMeta(name, problems)


class TestFindNewSolves:
    def test_single_new_solve(self):
        state = {5: {'bob': {3}}}
        metas = {5: ContestMeta('Round 5', {1: 'a', 2: 'b', 3: 'c', 4: 'Two Sum', 5: 'e', 6: 'f'})}

        events = list(find_new_solves(state, {5: {'bob': [3, 4]}}, metas, [BOB]))

        assert events == [SolveEvent(5, 'bob', 4, 'Two Sum', 'Round 5', 2, 6)]
        assert state == {5: {'bob': {3, 4}}}

    def test_known_solves_are_not_repeated(self):
        state = {5: {'bob': {3, 4}}}
        rankings = {5: {'bob': [3, 4]}}
        assert list(find_new_solves(state, rankings, {5: _meta()}, [BOB])) == []
        assert list(find_new_solves(state, rankings, {5: _meta()}, [BOB])) == []

    def test_done_counts_up(self):
        state = {5: {'bob': {1}}}
        events = list(find_new_solves(state, {5: {'bob': [2, 1, 3]}}, {5: _meta()}, [BOB]))
        assert [(e.problem_id, e.done, e.total) for e in events] == [(2, 2, 6), (3, 3, 6)]

    def test_order_follows_contests_users_and_ranking(self):
        rankings = {7: {'alice': [9], 'bob': [5, 2]}, 3: {'alice': [1]}}
        metas = {7: _meta(10), 3: _meta(3)}
        events = list(find_new_solves({}, rankings, metas, [BOB, ALICE]))
        assert [(e.contest_id, e.user_name, e.problem_id) for e in events] == [
            (7, 'bob', 5), (7, 'bob', 2), (7, 'alice', 9), (3, 'alice', 1),
        ]

    def test_new_user_starts_empty(self):
        state = {5: {'bob': {1}}}
        events = list(find_new_solves(state, {5: {'alice': [1, 2]}}, {5: _meta()}, [BOB, ALICE]))
        assert [(e.user_name, e.done) for e in events] == [('alice', 1), ('alice', 2)]
        assert state[5]['alice'] == {1, 2}

    def test_untracked_and_missing_users_ignored(self):
        state = {}
        events = list(find_new_solves(state, {5: {'mallory': [1]}}, {5: _meta()}, [BOB]))
        assert events == []
        assert state == {5: {}}

    def test_missing_problem_name(self):
        events = list(find_new_solves({}, {5: {'bob': [99]}}, {5: _meta(2)}, [BOB]))
        assert events[0].problem_name == '#99'

    def test_contest_without_problems(self):
        events = list(find_new_solves({}, {5: {'bob': [1]}}, {5: ContestMeta('Empty', {})}, [BOB]))
        assert events[0].total == 0

    def test_removed_upstream_stays_recorded(self):
        state = {5: {'bob': {1, 2}}}
        assert list(find_new_solves(state, {5: {'bob': [2]}}, {5: _meta()}, [BOB])) == []
        assert state[5]['bob'] == {1, 2}


class TestSeedState:
    def test_seed_tracked_users_only(self):
        rankings = {1: {'alice': [10, 11], 'mallory': [1]}}
        assert seed_state(rankings, [ALICE, BOB]) == {1: {'alice': {10, 11}}}


class TestHelpers:
    def test_copy_is_independent(self):
        state = {1: {'alice': {1}}}
        working = copy_state(state)
        working[1]['alice'].add(2)
        working[2] = {}
        assert state == {1: {'alice': {1}}}

    def test_forget_solve(self):
        state = {5: {'bob': {3, 4}}}
        forget_solve(state, SolveEvent(5, 'bob', 4, 'x', 'y', 2, 6))
        assert state == {5: {'bob': {3}}}

    def test_forget_unknown_is_noop(self):
        state = {}
        forget_solve(state, SolveEvent(5, 'bob', 4, 'x', 'y', 2, 6))
        assert state == {}
