from decimal import Decimal

import pytest

from nirvana.center_config import SECONDS_IN_DAY, NirvCenterConfig, NirvCenterConfigV3
from nirvana.numbers import ALMS, ANA, NIRV, U64_MAX, CoarseNumber, PreciseNumber

CONFIGS = [NirvCenterConfig, NirvCenterConfigV3]


@pytest.mark.parametrize("cls", CONFIGS)
def test_bootstrap_window(cls):
    config = cls()
    offset = PreciseNumber.whole(2)
    config.start_bootstrap(100, 50, offset)
    assert config.bs_start_offset == offset
    assert config.bs_end_time_seconds() == 100 + 50
    assert not config.is_bootstrapping(100)
    assert config.is_bootstrapping(101)
    assert config.is_bootstrapping(149)
    assert not config.is_bootstrapping(150)
    assert not config.bootstrapping_ended(150)
    assert config.bootstrapping_ended(151)


@pytest.mark.parametrize("cls", CONFIGS)
def test_swap_fee_split_and_index(cls):
    config = cls(instant_buy_fee=CoarseNumber(10_000), sell_fee=CoarseNumber(30_000))
    amount = ANA.whole(100)
    less, fee = config.collect_ana_swap_fee(True, amount, ALMS.whole(1))
    assert less + fee == amount
    assert fee == amount * CoarseNumber(10_000)
    assert config.ana_fee_index == PreciseNumber.from_decimal(fee.to_decimal())

    less_sell, fee_sell = config.collect_ana_swap_fee(False, amount, ALMS.whole(1))
    assert fee_sell == amount * CoarseNumber(30_000)
    assert less_sell + fee_sell == amount


@pytest.mark.parametrize("cls", CONFIGS)
def test_fee_with_no_alms_staked_leaves_index(cls):
    config = cls(unstake_fee=CoarseNumber(50_000), trana_buy_fee=CoarseNumber(20_000))
    less, fee = config.collect_ana_unstake_fee(ANA.whole(10), ALMS.ZERO)
    assert less + fee == ANA.whole(10)
    less, fee = config.collect_trana_buy_fee(ANA.whole(10), ALMS.ZERO)
    assert fee == ANA.whole(10) * CoarseNumber(20_000)
    assert config.ana_fee_index == PreciseNumber.ZERO


@pytest.mark.parametrize("cls", CONFIGS)
def test_fee_truncates_toward_zero(cls):
    config = cls(unstake_fee=CoarseNumber(333_333))
    amount = ANA(7)
    less, fee = config.collect_ana_unstake_fee(amount, ALMS.whole(1))
    assert fee == amount * CoarseNumber(333_333)
    assert less.val + fee.val == amount.val


@pytest.mark.parametrize("cls", CONFIGS)
def test_nirv_origination_fee(cls):
    config = cls(nirv_loan_origination_fee=CoarseNumber(10_000))
    requested = NIRV.whole(200)
    less, fee = config.collect_nirv_origination_fee(requested, ALMS.whole(2))
    assert isinstance(less, NIRV) and isinstance(fee, NIRV)
    assert less + fee == requested
    per_alms = PreciseNumber.from_decimal(fee.to_decimal() / 2)
    assert config.nirv_fee_index == per_alms


@pytest.mark.parametrize("cls", CONFIGS)
def test_nirv_fee_ignored_without_stakers(cls):
    config = cls()
    config.collect_nirv_fee(NIRV.whole(5), ALMS.ZERO)
    assert config.nirv_fee_index == PreciseNumber.ZERO


def _with_rate(cls, rate):
    if cls is NirvCenterConfig:
        return cls(reward_rate=rate)
    return cls(prana_reward_rate=rate)


@pytest.mark.parametrize("cls", CONFIGS)
def test_drop_prana_reward_additive_over_intervals(cls):
    rate = PreciseNumber.from_decimal(Decimal("0.01"))
    once = _with_rate(cls, rate)
    once.drop_prana_reward(ANA.whole(1000), ANA.whole(500), SECONDS_IN_DAY)
    twice = _with_rate(cls, rate)
    twice.drop_prana_reward(ANA.whole(1000), ANA.whole(500), SECONDS_IN_DAY // 2)
    twice.drop_prana_reward(ANA.whole(1000), ANA.whole(500), SECONDS_IN_DAY // 2)
    assert once.reward_index.val > 0
    assert once.reward_index == twice.reward_index


@pytest.mark.parametrize("cls", CONFIGS)
def test_drop_prana_reward_full_day(cls):
    config = _with_rate(cls, PreciseNumber.whole(1))
    config.drop_prana_reward(ANA.whole(10), ANA.whole(10), SECONDS_IN_DAY)
    assert config.reward_index == PreciseNumber.whole(1)


@pytest.mark.parametrize("cls", CONFIGS)
def test_drop_prana_reward_without_stakers(cls):
    config = _with_rate(cls, PreciseNumber.whole(1))
    config.drop_prana_reward(ANA.whole(10), ANA.ZERO, SECONDS_IN_DAY)
    assert config.reward_index == PreciseNumber.ZERO


def test_v3_drop_uses_prana_reward_rate():
    config = NirvCenterConfigV3(prana_reward_rate=PreciseNumber.ZERO)
    config.drop_prana_reward(ANA.whole(10), ANA.whole(10), SECONDS_IN_DAY)
    assert config.reward_index == PreciseNumber.ZERO


def test_collect_prana_fee():
    config = NirvCenterConfigV3()
    config.collect_prana_fee(ANA.whole(3), ALMS.whole(1))
    assert config.prana_fee_index == PreciseNumber.whole(3)
    config.collect_prana_fee(ANA.whole(3), ALMS.ZERO)
    assert config.prana_fee_index == PreciseNumber.whole(3)


def test_calc_nirv_debt_fee_documented_example():
    config = NirvCenterConfigV3(nirv_debt_fee=CoarseNumber(40_000))
    less, fee = config.calc_nirv_debt_fee(ANA.whole(100), Decimal("0.5"))
    assert less == ANA.whole(98)
    assert fee == ANA.whole(2)


def test_calc_nirv_debt_fee_zero_utilization():
    config = NirvCenterConfigV3(nirv_debt_fee=CoarseNumber(40_000))
    less, fee = config.calc_nirv_debt_fee(ANA.whole(100), Decimal(0))
    assert less == ANA.whole(100)
    assert fee == ANA.ZERO
    assert config.prana_fee_index == PreciseNumber.ZERO