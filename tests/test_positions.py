import pytest

from perps_session.bootstrap import AccountBootstrapper
from perps_session.errors import AccountNotReady, PositionOperationFailed
from perps_session.positions import PositionController
from perps_session.schemas import Direction, Market, quote_amount

from conftest import WALLET, FakeExchange

SOL = Market(symbol="SOL", market_index=0)


def _ready_controller(exchange):
    boot = AccountBootstrapper(exchange, WALLET, quote_amount(10_000), "0x1111111111111111111111111111111111111111")
    boot.ensure_ready()
    return PositionController(exchange, boot)


def test_open_then_reduce_leaves_net_long():
    exchange = FakeExchange(account_exists=True)
    ctl = _ready_controller(exchange)

    ctl.open(Direction.LONG, quote_amount(5000), SOL)
    ctl.reduce(Direction.SHORT, quote_amount(2000), SOL)

    assert exchange.net_position[0] == quote_amount(3000)


def test_reduce_uses_the_open_primitive():
    exchange = FakeExchange(account_exists=True)
    ctl = _ready_controller(exchange)

    ctl.reduce(Direction.SHORT, quote_amount(2000), SOL)

    assert exchange.mutations[-1] == ("open_position", Direction.SHORT, quote_amount(2000), 0)


def test_close_flattens_any_exposure():
    exchange = FakeExchange(account_exists=True)
    ctl = _ready_controller(exchange)

    ctl.open(Direction.SHORT, quote_amount(700), SOL)
    ctl.close(SOL)

    assert exchange.net_position[0] == 0


def test_close_on_flat_market_is_a_noop_success():
    exchange = FakeExchange(account_exists=True)
    ctl = _ready_controller(exchange)

    result = ctl.close(SOL)
    result_again = ctl.close(SOL)

    assert result.signature
    assert result_again.signature
    assert exchange.net_position[0] == 0


def test_operations_require_ready_account():
    exchange = FakeExchange(account_exists=True)
    boot = AccountBootstrapper(exchange, WALLET, quote_amount(10_000), "0x1111111111111111111111111111111111111111")
    ctl = PositionController(exchange, boot)

    with pytest.raises(AccountNotReady):
        ctl.open(Direction.LONG, quote_amount(5000), SOL)
    with pytest.raises(AccountNotReady):
        ctl.reduce(Direction.SHORT, quote_amount(2000), SOL)
    with pytest.raises(AccountNotReady):
        ctl.close(SOL)
    assert exchange.mutations == []


def test_failure_propagates_without_rollback():
    exchange = FakeExchange(account_exists=True)
    ctl = _ready_controller(exchange)
    ctl.open(Direction.LONG, quote_amount(5000), SOL)

    exchange.fail_on["open_position"] = PositionOperationFailed("rejected", operation="open_position")
    with pytest.raises(PositionOperationFailed):
        ctl.reduce(Direction.SHORT, quote_amount(2000), SOL)

    # Whatever was confirmed before stays as-is
    assert exchange.net_position[0] == quote_amount(5000)
