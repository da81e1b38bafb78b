import pytest

from placements import states
from placements.models import Referral


@pytest.mark.parametrize("current,target,allowed", [
    (states.REFERRED, states.INTERVIEW_SCHEDULED, True),
    (states.REFERRED, states.WORKING, True),
    (states.HIRED, states.INTERVIEW_DONE, False),
    (states.WORKING, states.WORKING, False),
    (states.WORKING, states.FULL_PAID, True),
    (states.REFERRED, states.CANCELLED, True),
    (states.ASSIGNED, states.DECLINED, True),
    (states.CANCELLED, states.REFERRED, False),
    (states.DECLINED, states.CANCELLED, False),
    (states.REFERRED, 'unknown', False),
])
def test_can_transition(current, target, allowed):
    assert states.can_transition(current, target) is allowed


def test_dispatch_done_statuses_include_everything_past_the_interview():
    expected = set(states.PIPELINE[states.PIPELINE.index(states.INTERVIEW_DONE):])
    assert states.INTERVIEW_DONE_STATUSES == expected


class TestReferralAdvance:
    def test_moves_forward(self):
        referral = Referral(referral_status=states.REFERRED)
        referral.advance_to(states.INTERVIEW_SCHEDULED)
        assert referral.referral_status == states.INTERVIEW_SCHEDULED

    def test_rejects_backwards_move(self):
        referral = Referral(referral_status=states.HIRED)
        with pytest.raises(states.InvalidTransition) as excinfo:
            referral.advance_to(states.REFERRED)
        assert excinfo.value.current == states.HIRED
        assert referral.referral_status == states.HIRED

    def test_absorbing_state_is_final(self):
        referral = Referral(referral_status=states.DECLINED)
        with pytest.raises(states.InvalidTransition):
            referral.advance_to(states.HIRED)
