"""TradingService: LMSR buys and sells against a market escrow, and payouts.

Value flow per trade (C = pre-fee cost or proceeds, fees split from C):

  buy:   trader -> escrow  C + resolver_fee + lp_fee
         trader -> wallet  protocol_fee
         current_liquidity += C + lp_fee

  sell:  escrow -> trader  C - total_fees
         escrow -> wallet  protocol_fee
         current_liquidity -= C - lp_fee

Resolver fees stay in escrow until the first winning claim pays them out.
"""

import logging

from src.pm_admin.domain.global_config import ConfigStore, GlobalConfig
from src.pm_clearing.domain.fee import FeeBreakdown, split_fees
from src.pm_clearing.domain.invariants import verify_bounded_loss
from src.pm_clearing.infrastructure.ledger import ValueLedger, escrow_account
from src.pm_common.enums import EventType, LedgerEntryType, MarketState, Outcome, ShareSide
from src.pm_common.errors import (
    AlreadyClaimedError,
    InsufficientLiquidityError,
    InsufficientSharesError,
    InvalidMarketStateError,
    NoWinningsError,
    PositionNotFoundError,
    ProtocolPausedError,
    SlippageExceededError,
    TradeTooSmallError,
    ZeroAmountError,
)
from src.pm_market.application.unit_of_work import MarketGuard, UnitOfWork
from src.pm_market.domain.models import Market, Position
from src.pm_market.domain.repository import PositionRepositoryProtocol
from src.pm_math import lmsr
from src.pm_math.fixed_point import PRECISION, mul_div
from src.pm_trading.domain.models import MIN_TRADE_AMOUNT, ClaimResult, TradeResult

logger = logging.getLogger(__name__)


def _check_tradeable(market: Market, cfg: GlobalConfig) -> None:
    if cfg.is_paused:
        raise ProtocolPausedError()
    if market.state != MarketState.ACTIVE:
        raise InvalidMarketStateError(market.id, market.state.value)


class TradingService:
    def __init__(
        self,
        guard: MarketGuard,
        positions: PositionRepositoryProtocol,
        ledger: ValueLedger,
        config: ConfigStore,
    ) -> None:
        self._guard = guard
        self._positions = positions
        self._ledger = ledger
        self._config = config

    def get_position(self, market_id: str, user_id: str) -> Position:
        position = self._positions.get(market_id, user_id)
        if position is None:
            raise PositionNotFoundError(market_id, user_id)
        return position

    def buy_shares(
        self,
        caller: str,
        market_id: str,
        side: ShareSide,
        target_cost: int,
        max_total_cost: int | None = None,
    ) -> TradeResult:
        """Spend about target_cost (before fees) on side.

        max_total_cost bounds what the caller pays including fees.
        """
        if target_cost <= 0:
            raise ZeroAmountError()
        if target_cost < MIN_TRADE_AMOUNT:
            raise TradeTooSmallError(target_cost, MIN_TRADE_AMOUNT)
        cfg = self._config.current

        with self._guard.operation(market_id, transfers=True) as uow:
            market = uow.market
            _check_tradeable(market, cfg)

            cost, shares = lmsr.buy_cost(
                market.shares_yes, market.shares_no, market.b_parameter, side, target_cost
            )
            if cost < MIN_TRADE_AMOUNT:
                raise TradeTooSmallError(cost, MIN_TRADE_AMOUNT)
            fees = split_fees(cost, cfg.protocol_fee_bps, cfg.resolver_fee_bps, cfg.lp_fee_bps)
            total = cost + fees.total_fees
            if max_total_cost is not None and total > max_total_cost:
                raise SlippageExceededError(total, max_total_cost)

            self._ledger.transfer(
                caller,
                escrow_account(market_id),
                cost + fees.resolver_fee + fees.lp_fee,
                LedgerEntryType.BUY_COST,
                market_id,
            )
            self._ledger.transfer(
                caller, cfg.protocol_fee_wallet, fees.protocol_fee,
                LedgerEntryType.PROTOCOL_FEE, market_id,
            )

            if side == ShareSide.YES:
                market.shares_yes += shares
            else:
                market.shares_no += shares
            market.current_liquidity += cost + fees.lp_fee
            self._accrue(market, fees.protocol_fee, fees.resolver_fee, fees.lp_fee)
            market.total_volume += cost

            position = uow.position(caller, create=True)
            if side == ShareSide.YES:
                position.shares_yes += shares
            else:
                position.shares_no += shares
            position.total_invested += total
            self._touch(position, uow.now)

            result = self._finish(uow, caller, side, shares, cost, fees, total)
        logger.info(
            "Buy: market=%s user=%s side=%s shares=%d cost=%d fees=%d",
            market_id, caller, side.value, shares, cost, fees.total_fees,
        )
        return result

    def sell_shares(
        self,
        caller: str,
        market_id: str,
        side: ShareSide,
        shares: int,
        min_proceeds: int = 0,
    ) -> TradeResult:
        """Sell shares back to the curve; min_proceeds bounds the net received."""
        if shares <= 0:
            raise ZeroAmountError()
        cfg = self._config.current

        with self._guard.operation(market_id, transfers=True) as uow:
            market = uow.market
            _check_tradeable(market, cfg)

            position = uow.position(caller)
            held = position.shares_of(side) if position is not None else 0
            if held < shares:
                raise InsufficientSharesError(shares, held)

            proceeds = lmsr.sell_proceeds(
                market.shares_yes, market.shares_no, market.b_parameter, side, shares
            )
            if proceeds < MIN_TRADE_AMOUNT:
                raise TradeTooSmallError(proceeds, MIN_TRADE_AMOUNT)
            fees = split_fees(proceeds, cfg.protocol_fee_bps, cfg.resolver_fee_bps, cfg.lp_fee_bps)
            net = proceeds - fees.total_fees
            if net < min_proceeds:
                raise SlippageExceededError(net, min_proceeds)

            released = proceeds - fees.lp_fee
            if market.current_liquidity < released:
                raise InsufficientLiquidityError(released, market.current_liquidity)

            escrow = escrow_account(market_id)
            self._ledger.transfer(escrow, caller, net, LedgerEntryType.SELL_PROCEEDS, market_id)
            self._ledger.transfer(
                escrow, cfg.protocol_fee_wallet, fees.protocol_fee,
                LedgerEntryType.PROTOCOL_FEE, market_id,
            )

            if side == ShareSide.YES:
                market.shares_yes -= shares
                position.shares_yes -= shares
            else:
                market.shares_no -= shares
                position.shares_no -= shares
            market.current_liquidity -= released
            self._accrue(market, fees.protocol_fee, fees.resolver_fee, fees.lp_fee)
            market.total_volume += proceeds
            self._touch(position, uow.now)

            result = self._finish(uow, caller, side, shares, proceeds, fees, net)
        logger.info(
            "Sell: market=%s user=%s side=%s shares=%d proceeds=%d net=%d",
            market_id, caller, side.value, shares, proceeds, net,
        )
        return result

    def claim_winnings(self, caller: str, market_id: str) -> ClaimResult:
        """Pay the caller's winning shares pro-rata from current_liquidity. One-shot."""
        with self._guard.operation(market_id, transfers=True) as uow:
            market = uow.market
            if market.state != MarketState.FINALIZED:
                raise InvalidMarketStateError(market_id, market.state.value)
            position = uow.position(caller)
            if position is None:
                raise PositionNotFoundError(market_id, caller)
            if position.has_claimed:
                raise AlreadyClaimedError(market_id, caller)

            outcome = market.final_outcome
            user_shares = position.winning_shares(outcome)
            if user_shares == 0:
                raise NoWinningsError(market_id, caller)

            escrow = escrow_account(market_id)
            resolver_paid = self._settle_resolver_fees(market, outcome, escrow)

            payout = mul_div(market.current_liquidity, user_shares, market.winning_shares_total())
            self._ledger.transfer(escrow, caller, payout, LedgerEntryType.CLAIM_PAYOUT, market_id)
            market.current_liquidity -= payout
            if outcome in (Outcome.YES, Outcome.INVALID):
                market.shares_yes -= position.shares_yes
            if outcome in (Outcome.NO, Outcome.INVALID):
                market.shares_no -= position.shares_no

            position.has_claimed = True
            position.claimed_amount = payout
            uow.emit(
                EventType.WINNINGS_CLAIMED,
                user_id=caller,
                outcome=outcome.value,
                winning_shares=user_shares,
                payout=payout,
            )
        logger.info("Claim: market=%s user=%s payout=%d", market_id, caller, payout)
        return ClaimResult(
            market_id=market_id,
            user_id=caller,
            outcome=outcome.value,
            winning_shares=user_shares,
            payout=payout,
            resolver_fee_paid=resolver_paid,
        )

    def _settle_resolver_fees(self, market: Market, outcome: Outcome, escrow: str) -> int:
        """First claim releases accumulated resolver fees.

        A YES/NO outcome pays them to the resolver; an INVALID outcome folds
        them back into the pool for claimants. Returns the amount paid out.
        """
        if market.resolver_fees_paid:
            return 0
        market.resolver_fees_paid = True
        fees = market.accumulated_resolver_fees
        if outcome == Outcome.INVALID:
            market.current_liquidity += fees
            return 0
        self._ledger.transfer(
            escrow, market.resolver, fees, LedgerEntryType.RESOLVER_FEE, market.id
        )
        return fees

    @staticmethod
    def _accrue(market: Market, protocol_fee: int, resolver_fee: int, lp_fee: int) -> None:
        market.accumulated_protocol_fees += protocol_fee
        market.accumulated_resolver_fees += resolver_fee
        market.accumulated_lp_fees += lp_fee

    @staticmethod
    def _touch(position: Position, now: int) -> None:
        position.trades_count += 1
        position.last_trade_at = now

    @staticmethod
    def _finish(
        uow: UnitOfWork,
        caller: str,
        side: ShareSide,
        shares: int,
        amount: int,
        fees: FeeBreakdown,
        net: int,
    ) -> TradeResult:
        market = uow.market
        verify_bounded_loss(market.initial_liquidity, market.current_liquidity, market.b_parameter)
        p_yes = lmsr.price_yes(market.shares_yes, market.shares_no, market.b_parameter)
        result = TradeResult(
            market_id=market.id,
            user_id=caller,
            side=side.value,
            shares=shares,
            cost=amount,
            fees=fees,
            net_amount=net,
            price_yes=p_yes,
            price_no=PRECISION - p_yes,
        )
        uow.emit(
            EventType.TRADE_EXECUTED,
            user_id=caller,
            side=side.value,
            shares=shares,
            amount=amount,
            total_fees=fees.total_fees,
            price_yes=p_yes,
        )
        return result
