from decimal import Decimal

import pytest

from nirvana.center_config import NirvCenterConfigV3
from nirvana.numbers import ALMS, ANA, NIRV, CoarseNumber, PreciseNumber
from nirvana.price_field import PriceFieldV2
from nirvana.user_reward import (
    BorrowedAmountLargerThanLimit,
    InsufficientStakedANAToBackBorrowedNIRV,
    InsufficientStakedANAToBorrowNIRV,
    RepayNIRVMoreThanBorrowed,
    RewardError,
    UserReward,
    UserRewardV2,
)

KINDS = [UserReward, UserRewardV2]


def _floor_one() -> PriceFieldV2:
    return PriceFieldV2(floor_price=PreciseNumber.whole(1))


@pytest.mark.parametrize("kind", KINDS)
def test_calc_new_rewards_zero(kind):
    index = PreciseNumber(1_000_000_000)
    assert kind().calc_rewards_before_fees(index).val == 0
    user = kind(index=PreciseNumber(1_000_000))
    assert user.calc_rewards_before_fees(index).val == 0


@pytest.mark.parametrize("kind", KINDS)
def test_calc_new_rewards(kind):
    index = PreciseNumber(2_000_000_000)
    user = kind(index=PreciseNumber(1_000_000_000), staked_amount=ANA(3_000_000))
    assert user.calc_rewards_before_fees(index).val == 3_000

    user = kind(index=PreciseNumber(2_000_000_000), staked_amount=ANA(3_000_000))
    assert user.calc_rewards_before_fees(index).val == 0


def test_index_behind_user_index_overflows():
    user = UserReward(index=PreciseNumber(10), staked_amount=ANA.whole(1))
    with pytest.raises(OverflowError):
        user.calc_rewards_before_fees(PreciseNumber(5))


def test_borrow_limit_is_staked_at_floor():
    user = UserReward(staked_amount=ANA.whole(100))
    limit = user.get_nirv_borrow_limit(_floor_one())
    assert limit == Decimal("100")
    assert limit.as_tuple().exponent == -6


def test_borrow_and_utilization():
    user = UserRewardV2(staked_amount=ANA.whole(100))
    pf = _floor_one()
    assert user.get_nirv_borrow_utilization(pf) == 0
    user.borrow_nirv(NIRV.whole(50), pf)
    assert user.borrowed_nirv == NIRV.whole(50)
    assert user.get_nirv_borrow_utilization(pf) == Decimal("0.5")


def test_borrow_over_limit_raises():
    user = UserReward(staked_amount=ANA.whole(10))
    with pytest.raises(InsufficientStakedANAToBorrowNIRV):
        user.borrow_nirv(NIRV.whole(11), _floor_one())


def test_utilization_over_limit_raises():
    user = UserReward(staked_amount=ANA.whole(10), borrowed_nirv=NIRV.whole(20))
    with pytest.raises(BorrowedAmountLargerThanLimit):
        user.get_nirv_borrow_utilization(_floor_one())


def test_repay():
    user = UserReward(borrowed_nirv=NIRV.whole(5))
    user.repay_nirv(NIRV.whole(2))
    assert user.borrowed_nirv == NIRV.whole(3)
    with pytest.raises(RepayNIRVMoreThanBorrowed):
        user.repay_nirv(NIRV.whole(4))


def test_rewards_and_debt_fee():
    config = NirvCenterConfigV3(
        reward_index=PreciseNumber.whole(1), nirv_debt_fee=CoarseNumber(40_000)
    )
    user = UserReward(staked_amount=ANA.whole(100), borrowed_nirv=NIRV.whole(50))
    rewards, fees = user.calc_rewards_and_fees(config, _floor_one())
    assert rewards == ANA.whole(98)
    assert fees == ANA.whole(2)


def test_stake_stages_rewards():
    config = NirvCenterConfigV3(reward_index=PreciseNumber.whole(1))
    user = UserReward(staked_amount=ANA.whole(10))
    user.stake_ana(ANA.whole(5), config, _floor_one())
    assert user.staked_amount == ANA.whole(15)
    assert user.staged_pre_ana_rewards == ANA.whole(10)
    assert user.staged_pre_ana_fees == ANA.ZERO
    assert user.index == PreciseNumber.whole(1)


def test_claim_collects_fee_and_resets():
    config = NirvCenterConfigV3(
        reward_index=PreciseNumber.whole(1), nirv_debt_fee=CoarseNumber(40_000)
    )
    user = UserReward(
        staked_amount=ANA.whole(100),
        borrowed_nirv=NIRV.whole(50),
        staged_pre_ana_rewards=ANA.whole(1),
    )
    rewards, fees = user.claim_prana_rewards(config, _floor_one(), ALMS.whole(2))
    assert rewards == ANA.whole(99)
    assert fees == ANA.whole(2)
    assert config.prana_fee_index == PreciseNumber.whole(1)
    assert user.index == PreciseNumber.whole(1)
    assert user.staged_pre_ana_rewards == ANA.ZERO
    assert user.staged_pre_ana_fees == ANA.ZERO


def test_unstake_charges_fee():
    config = NirvCenterConfigV3(unstake_fee=CoarseNumber(100_000))
    user = UserReward(staked_amount=ANA.whole(100))
    less, fee = user.unstake_ana(ANA.whole(10), config, _floor_one(), ALMS.ZERO)
    assert less == ANA.whole(9)
    assert fee == ANA.whole(1)
    assert user.staked_amount == ANA.whole(90)


def test_unstake_below_debt_raises():
    config = NirvCenterConfigV3()
    user = UserReward(staked_amount=ANA.whole(100), borrowed_nirv=NIRV.whole(95))
    with pytest.raises(InsufficientStakedANAToBackBorrowedNIRV) as info:
        user.unstake_ana(ANA.whole(10), config, _floor_one(), ALMS.ZERO)
    assert isinstance(info.value, RewardError)
    assert user.staked_amount == ANA.whole(100)


def test_reset_rewards():
    user = UserRewardV2(
        staged_pre_ana_rewards=ANA.whole(3), staged_pre_ana_fees=ANA.whole(1)
    )
    user.reset_rewards(PreciseNumber(7))
    assert user.index == PreciseNumber(7)
    assert user.staged_pre_ana_rewards == ANA.ZERO
    assert user.staged_pre_ana_fees == ANA.ZERO