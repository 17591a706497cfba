"""Tests for the transition phase state machine."""

import pytest

from seasonflow.season.phases import (
    TransitionPhase,
    can_transition,
    first_phase,
    is_fatal,
    next_phase,
)


# ---------------------------------------------------------------------------
# TransitionPhase enum
# ---------------------------------------------------------------------------

class TestTransitionPhase:
    def test_phase_count(self):
        assert len(TransitionPhase) == 10

    def test_phases_are_strings(self):
        for phase in TransitionPhase:
            assert isinstance(phase.value, str)
            assert phase == phase.value

    def test_numbers_follow_declaration_order(self):
        assert [p.number for p in TransitionPhase] == list(range(1, 11))
        assert TransitionPhase.VALIDATE.number == 1
        assert TransitionPhase.CLEANUP.number == 10

    def test_every_phase_has_a_label(self):
        for phase in TransitionPhase:
            assert phase.label
        assert TransitionPhase.PUSH.label == "Pushing changes to remote"

    def test_str_methods_not_shadowed(self):
        assert TransitionPhase.SYNC.title() == "Sync"


# ---------------------------------------------------------------------------
# can_transition
# ---------------------------------------------------------------------------

class TestCanTransition:
    # Valid transitions
    def test_validate_to_backup(self):
        assert can_transition(TransitionPhase.VALIDATE, TransitionPhase.BACKUP) is True

    def test_archive_to_promote(self):
        assert can_transition(TransitionPhase.ARCHIVE_CURRENT, TransitionPhase.PROMOTE_NEXT) is True

    def test_push_to_cleanup(self):
        assert can_transition(TransitionPhase.PUSH, TransitionPhase.CLEANUP) is True

    # Invalid transitions
    def test_cannot_skip_backup(self):
        assert can_transition(TransitionPhase.VALIDATE, TransitionPhase.SYNC) is False

    def test_cannot_promote_before_archive(self):
        assert can_transition(TransitionPhase.FINALIZE_CURRENT, TransitionPhase.PROMOTE_NEXT) is False

    def test_cannot_go_backwards(self):
        assert can_transition(TransitionPhase.PUSH, TransitionPhase.UPDATE_CONFIG) is False

    def test_cleanup_is_terminal(self):
        for phase in TransitionPhase:
            assert can_transition(TransitionPhase.CLEANUP, phase) is False

    def test_self_transition_invalid(self):
        for phase in TransitionPhase:
            assert can_transition(phase, phase) is False


# ---------------------------------------------------------------------------
# next_phase / first_phase
# ---------------------------------------------------------------------------

class TestNextPhase:
    def test_first_phase_is_validate(self):
        assert first_phase() is TransitionPhase.VALIDATE

    def test_walk_visits_every_phase_once(self):
        seen = []
        phase = first_phase()
        while phase is not None:
            seen.append(phase)
            phase = next_phase(phase)
        assert seen == list(TransitionPhase)

    def test_config_update_precedes_push(self):
        assert next_phase(TransitionPhase.UPDATE_CONFIG) is TransitionPhase.PUSH

    def test_cleanup_has_no_successor(self):
        assert next_phase(TransitionPhase.CLEANUP) is None


# ---------------------------------------------------------------------------
# is_fatal
# ---------------------------------------------------------------------------

class TestIsFatal:
    @pytest.mark.parametrize("phase", [
        TransitionPhase.VALIDATE,
        TransitionPhase.BACKUP,
        TransitionPhase.FINALIZE_CURRENT,
        TransitionPhase.ARCHIVE_CURRENT,
        TransitionPhase.PROMOTE_NEXT,
        TransitionPhase.REINITIALIZE_NEXT,
        TransitionPhase.UPDATE_CONFIG,
    ])
    def test_ref_changing_phases_are_fatal(self, phase):
        assert is_fatal(phase) is True

    @pytest.mark.parametrize("phase", [
        TransitionPhase.SYNC,
        TransitionPhase.PUSH,
        TransitionPhase.CLEANUP,
    ])
    def test_remote_and_cleanup_phases_are_tolerated(self, phase):
        assert is_fatal(phase) is False
