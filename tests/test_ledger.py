import pytest

from racebook.core import EngineConfig, ErrorCode, RaceBettingEngine
from racebook.core.errors import EngineError, Result
from racebook.core.ledger import Ledger
from racebook.core.storage import InMemoryStorage

OWNER = "ST1HTBVD3JG9C05J7HBJTHGR0GGW7KXW28M5JS8QE"
USER1 = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"


def make_engine():
    return RaceBettingEngine(storage=InMemoryStorage(), config=EngineConfig(contract_owner=OWNER))


def test_deposit_withdraw_scenario():
    engine = make_engine()

    result = engine.deposit(USER1, 1000)
    assert result.is_ok
    assert result.value == 1000
    assert engine.balance_of(USER1) == 1000

    result = engine.withdraw(USER1, 500)
    assert result.is_ok
    assert result.value == 500
    assert engine.balance_of(USER1) == 500

    result = engine.withdraw(USER1, 600)
    assert not result.is_ok
    assert result.error == ErrorCode.INSUFFICIENT_FUNDS
    assert engine.balance_of(USER1) == 500


def test_zero_and_negative_deposits_rejected():
    engine = make_engine()
    engine.deposit(USER1, 100)

    for amount in (0, -1, -500):
        result = engine.deposit(USER1, amount)
        assert result.error == ErrorCode.INVALID_AMOUNT
        assert int(result.error) == 107

    assert engine.balance_of(USER1) == 100


def test_withdraw_exact_balance_and_unknown_account():
    engine = make_engine()
    engine.deposit(USER1, 300)

    assert engine.withdraw(USER1, 300).is_ok
    assert engine.balance_of(USER1) == 0

    result = engine.withdraw("nobody", 1)
    assert result.error == ErrorCode.INSUFFICIENT_FUNDS
    assert engine.balance_of("nobody") == 0


def test_negative_withdraw_rejected():
    engine = make_engine()
    engine.deposit(USER1, 100)

    result = engine.withdraw(USER1, -50)
    assert result.error == ErrorCode.INVALID_AMOUNT
    assert engine.balance_of(USER1) == 100


def test_ledger_raises_engine_error():
    ledger = Ledger(InMemoryStorage())

    with pytest.raises(EngineError) as exc:
        ledger.debit(USER1, 1)
    assert exc.value.code == ErrorCode.INSUFFICIENT_FUNDS

    ledger.credit(USER1, 40)
    ledger.credit(USER1, 2)
    assert ledger.balance_of(USER1) == 42


def test_result_helpers():
    assert Result.ok(1000).to_dict() == {'isOk': True, 'value': 1000}
    assert Result.err(ErrorCode.INSUFFICIENT_FUNDS).to_dict() == {'isOk': False, 'error': 105}
    assert Result.ok(7).unwrap() == 7

    with pytest.raises(EngineError):
        Result.err(105).unwrap()


def test_shared_error_codes():
    assert ErrorCode.RACE_NOT_RUNNING == ErrorCode.RACE_NOT_ENDED == 104
    assert ErrorCode.INVALID_AMOUNT == ErrorCode.INVALID_BET == 107
    assert ErrorCode.INVALID_RACER_SET == ErrorCode.INVALID_RACER == 110
