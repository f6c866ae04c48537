"""Pool calculation engine.

Every method takes an immutable PoolRecord snapshot plus operation inputs
and returns a payload describing the complete new state, or raises a
PoolError on the first violated precondition. Nothing is mutated here: the
caller moves tokens according to the payload and then hands it to
PoolStateMachine.

Order of checks per operation:
1. Lifecycle state (check_state for launched-pool operations)
2. Input validation (zero amounts, u64 range, fee rates)
3. Checked arithmetic on reserves and supply
4. Invariant tolerance (ratio for provide/withdraw, product for swap)
5. Slippage (swap only)
"""

from __future__ import annotations

import structlog

from cpamm.errors import (
    AfterswapCalculationFailed,
    AmountOutOfRange,
    BaseLiquidityIsZero,
    BaseQuoteRatioCalculationFailed,
    ConstantProductCalculationFailed,
    EstimatedResultIsZero,
    LaunchLiquidityTooSmall,
    LpTokensCalculationFailed,
    LpTokensIsZero,
    LpTokensLeftSupplyIsZero,
    LpTokensSupplyIsZero,
    PoolAlreadyInitialized,
    PoolAlreadyLaunched,
    PoolNotInitialized,
    PoolNotLaunched,
    ProvidedBaseLiquidityIsZero,
    ProvidedLpTokensIsZero,
    ProvidedQuoteLiquidityIsZero,
    ProvideOverflow,
    ProvidersFeesIsZero,
    QuoteLiquidityIsZero,
    SwapAmountIsZero,
    SwapOverflow,
    WithdrawLiquidityCalculationFailed,
    WithdrawOverflow,
)
from cpamm.fees.config import PoolConfig
from cpamm.fees.splitter import DEFAULT_FEE_SPLITTER, FeeSplitter, validate_rates
from cpamm.pool.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from cpamm.pool.curve import (
    liquidity_from_share,
    lp_tokens_to_mint,
    opposite_reserve,
    sqrt_base_quote_ratio,
    sqrt_constant_product,
)
from cpamm.pool.invariants import InvariantGuard, check_swap_result
from cpamm.pool.payloads import (
    CollectFeesPayload,
    InitializePayload,
    LaunchPayload,
    ProvidePayload,
    SwapDirection,
    SwapPayload,
    WithdrawPayload,
)
from cpamm.pool.record import PoolIdentities, PoolRecord
from cpamm.safe_int import S

logger = structlog.get_logger()


def _require_u64(name: str, value: int) -> int:
    """Reject amounts that are not valid u64 values."""
    if not S(value).is_u64():
        raise AmountOutOfRange(f"{name} must be a u64 amount, got {value}")
    return value


class PoolCalculationEngine:
    """Stateless calculations for constant-product pool operations.

    Usage:
        engine = PoolCalculationEngine()
        payload = engine.swap(record, 1_000, 990, 10, 30, 5, SwapDirection.BASE_TO_QUOTE)
        # ... transfer payload.amount_to_withdraw to the trader ...
        state_machine.apply_swap(payload)
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        fee_splitter: FeeSplitter | None = None,
    ) -> None:
        self.config = config
        self.guard = InvariantGuard(config.tolerance)
        self.fee_splitter = fee_splitter if fee_splitter is not None else DEFAULT_FEE_SPLITTER

    def check_state(self, record: PoolRecord) -> None:
        """Assert the record is launched with non-empty reserves and supply.

        Raises:
            PoolNotLaunched: If the pool is not launched
            BaseLiquidityIsZero: If the base reserve is empty
            QuoteLiquidityIsZero: If the quote reserve is empty
            LpTokensSupplyIsZero: If there is no LP supply
        """
        if not record.launched:
            raise PoolNotLaunched("Pool is not launched")
        if record.base_reserve == 0:
            raise BaseLiquidityIsZero("Base reserve is zero")
        if record.quote_reserve == 0:
            raise QuoteLiquidityIsZero("Quote reserve is zero")
        if record.lp_supply == 0:
            raise LpTokensSupplyIsZero("LP supply is zero")

    def initialize(
        self,
        record: PoolRecord,
        identities: PoolIdentities,
        config: PoolConfig,
    ) -> InitializePayload:
        """Bind a fresh record to its identities and snapshot the fee rates.

        Raises:
            PoolAlreadyInitialized: If the record is already initialized
            FeeRateExceeded: If the config's rates are invalid
        """
        if record.initialized:
            raise PoolAlreadyInitialized("Pool is already initialized")
        validate_rates(config.providers_fee_rate_bp, config.protocol_fee_rate_bp)
        return InitializePayload(
            identities=identities,
            providers_fee_rate_bp=config.providers_fee_rate_bp,
            protocol_fee_rate_bp=config.protocol_fee_rate_bp,
        )

    def launch(self, record: PoolRecord, base_liquidity: int, quote_liquidity: int) -> LaunchPayload:
        """Compute the first state of a pool from its initial liquidity.

        The initial LP supply is floor(sqrt(base * quote)). Of that,
        10**lp_mint_decimals is locked forever and the rest goes to the
        launcher.

        Args:
            record: Initialized, not yet launched record
            base_liquidity: Base tokens deposited (net of transfer fees)
            quote_liquidity: Quote tokens deposited (net of transfer fees)

        Returns:
            LaunchPayload with reserves, supply, caches and mint amounts

        Raises:
            PoolAlreadyLaunched: If the pool is already launched
            PoolNotInitialized: If the pool is not initialized
            ProvidedBaseLiquidityIsZero: If base_liquidity is zero
            ProvidedQuoteLiquidityIsZero: If quote_liquidity is zero
            LpTokensIsZero: If the initial supply rounds to zero
            LaunchLiquidityTooSmall: If the supply is below the minimum
                multiple of the locked seed
        """
        if record.launched:
            raise PoolAlreadyLaunched("Pool is already launched")
        if not record.initialized:
            raise PoolNotInitialized("Pool is not initialized")
        _require_u64("base_liquidity", base_liquidity)
        _require_u64("quote_liquidity", quote_liquidity)
        if base_liquidity == 0:
            raise ProvidedBaseLiquidityIsZero("Provided base liquidity is zero")
        if quote_liquidity == 0:
            raise ProvidedQuoteLiquidityIsZero("Provided quote liquidity is zero")

        sqrt_cp = sqrt_constant_product(base_liquidity, quote_liquidity)
        if sqrt_cp is None:
            raise ConstantProductCalculationFailed("Initial constant product is zero")
        sqrt_ratio = sqrt_base_quote_ratio(base_liquidity, quote_liquidity)
        if sqrt_ratio is None:
            raise BaseQuoteRatioCalculationFailed("Initial base/quote ratio cannot be computed")

        lp_supply = sqrt_cp.to_int()
        if lp_supply == 0:
            raise LpTokensIsZero("Initial LP supply is zero")

        locked = self.config.initial_locked_liquidity
        minimum = locked * self.config.min_launch_supply_multiple
        if lp_supply < minimum:
            raise LaunchLiquidityTooSmall(
                f"Initial LP supply {lp_supply} is below {minimum} "
                f"({self.config.min_launch_supply_multiple}x locked liquidity {locked})"
            )

        payload = LaunchPayload(
            base_reserve=base_liquidity,
            quote_reserve=quote_liquidity,
            lp_supply=lp_supply,
            initial_locked_liquidity=locked,
            launch_liquidity=lp_supply - locked,
            sqrt_constant_product=sqrt_cp,
            sqrt_base_quote_ratio=sqrt_ratio,
        )
        logger.debug(
            "launch_computed",
            base_reserve=base_liquidity,
            quote_reserve=quote_liquidity,
            lp_supply=lp_supply,
            launch_liquidity=payload.launch_liquidity,
        )
        return payload

    def provide(self, record: PoolRecord, base_liquidity: int, quote_liquidity: int) -> ProvidePayload:
        """Compute the state after a proportional deposit.

        The deposit must keep sqrt(base/quote) within tolerance, which
        rejects lopsided deposits. LP tokens are minted in proportion to
        the growth of sqrt(base * quote).

        Raises:
            ProvidedBaseLiquidityIsZero: If base_liquidity is zero
            ProvidedQuoteLiquidityIsZero: If quote_liquidity is zero
            ProvideOverflow: If a reserve or the supply overflows u64
            LiquidityRatioToleranceExceeded: If the deposit is not proportional
            LpTokensCalculationFailed: If the mint amount cannot be computed
            LpTokensIsZero: If the deposit would mint nothing
        """
        self.check_state(record)
        _require_u64("base_liquidity", base_liquidity)
        _require_u64("quote_liquidity", quote_liquidity)
        if base_liquidity == 0:
            raise ProvidedBaseLiquidityIsZero("Provided base liquidity is zero")
        if quote_liquidity == 0:
            raise ProvidedQuoteLiquidityIsZero("Provided quote liquidity is zero")

        new_base = S(record.base_reserve).checked_add(base_liquidity)
        new_quote = S(record.quote_reserve).checked_add(quote_liquidity)
        if new_base is None or new_quote is None:
            raise ProvideOverflow("Reserve overflow while providing liquidity")

        new_sqrt_ratio = self.guard.validate_ratio(
            record.sqrt_base_quote_ratio, new_base.value, new_quote.value
        )
        new_sqrt_cp = sqrt_constant_product(new_base.value, new_quote.value)
        if new_sqrt_cp is None:
            raise ConstantProductCalculationFailed("Constant product after provide is zero")

        minted = lp_tokens_to_mint(record.lp_supply, record.sqrt_constant_product, new_sqrt_cp)
        if minted is None:
            raise LpTokensCalculationFailed("LP tokens to mint cannot be computed")
        if minted == 0:
            raise LpTokensIsZero("Provided liquidity would mint zero LP tokens")

        new_supply = S(record.lp_supply).checked_add(minted)
        if new_supply is None:
            raise ProvideOverflow("LP supply overflow while providing liquidity")

        logger.debug(
            "provide_computed",
            base_reserve=new_base.value,
            quote_reserve=new_quote.value,
            lp_tokens_to_mint=minted,
        )
        return ProvidePayload(
            base_reserve=new_base.value,
            quote_reserve=new_quote.value,
            lp_supply=new_supply.value,
            lp_tokens_to_mint=minted,
            sqrt_constant_product=new_sqrt_cp,
            sqrt_base_quote_ratio=new_sqrt_ratio,
        )

    def withdraw(self, record: PoolRecord, lp_tokens: int) -> WithdrawPayload:
        """Compute the state after redeeming LP tokens.

        Raises:
            ProvidedLpTokensIsZero: If lp_tokens is zero
            WithdrawOverflow: If lp_tokens exceeds the supply or an amount
                exceeds its reserve
            LpTokensLeftSupplyIsZero: If the withdrawal would drain the supply
            WithdrawLiquidityCalculationFailed: If an amount is zero or
                cannot be computed
            LiquidityRatioToleranceExceeded: If rounding moved the ratio too far
        """
        self.check_state(record)
        _require_u64("lp_tokens", lp_tokens)
        if lp_tokens == 0:
            raise ProvidedLpTokensIsZero("Provided LP tokens is zero")

        new_supply = S(record.lp_supply).checked_sub(lp_tokens)
        if new_supply is None:
            raise WithdrawOverflow(f"LP tokens {lp_tokens} exceed supply {record.lp_supply}")
        if new_supply == 0:
            raise LpTokensLeftSupplyIsZero("Withdrawal would leave zero LP supply")

        amounts = liquidity_from_share(
            lp_tokens,
            record.lp_supply,
            record.sqrt_constant_product,
            record.sqrt_base_quote_ratio,
        )
        if amounts is None:
            raise WithdrawLiquidityCalculationFailed(
                f"Cannot compute liquidity for {lp_tokens} of {record.lp_supply} LP tokens"
            )
        base_amount, quote_amount = amounts

        new_base = S(record.base_reserve).checked_sub(base_amount)
        new_quote = S(record.quote_reserve).checked_sub(quote_amount)
        if new_base is None or new_quote is None:
            raise WithdrawOverflow("Withdraw amount exceeds reserve")

        new_sqrt_ratio = self.guard.validate_ratio(
            record.sqrt_base_quote_ratio, new_base.value, new_quote.value
        )
        new_sqrt_cp = sqrt_constant_product(new_base.value, new_quote.value)
        if new_sqrt_cp is None:
            raise ConstantProductCalculationFailed("Constant product after withdraw is zero")

        logger.debug(
            "withdraw_computed",
            lp_tokens=lp_tokens,
            base_withdraw_amount=base_amount,
            quote_withdraw_amount=quote_amount,
        )
        return WithdrawPayload(
            base_reserve=new_base.value,
            quote_reserve=new_quote.value,
            lp_supply=new_supply.value,
            lp_tokens_to_burn=lp_tokens,
            base_withdraw_amount=base_amount,
            quote_withdraw_amount=quote_amount,
            sqrt_constant_product=new_sqrt_cp,
            sqrt_base_quote_ratio=new_sqrt_ratio,
        )

    def swap(
        self,
        record: PoolRecord,
        amount_in: int,
        estimated_result: int,
        allowed_slippage: int,
        providers_fee_rate_bp: int,
        protocol_fee_rate_bp: int,
        direction: SwapDirection,
    ) -> SwapPayload:
        """Compute the state after a swap.

        The gross input is split into provider fee, protocol fee and net
        input. Only the net input moves along the curve:

            new_in  = reserve_in + net
            new_out = floor(sqrt_cp^2 / new_in)
            result  = reserve_out - new_out

        The provider fee is then added to reserve_in (it stays with LPs)
        and the protocol fee goes to the accumulator of the input side.

        Args:
            record: Launched record
            amount_in: Gross input (net of token transfer fees)
            estimated_result: Output the trader expects
            allowed_slippage: Maximum |result - estimated_result|
            providers_fee_rate_bp: Provider fee rate in basis points
            protocol_fee_rate_bp: Protocol fee rate in basis points
            direction: Which side receives the input

        Returns:
            SwapPayload with new reserves, accumulators, caches and the
            amount owed to the trader

        Raises:
            SwapAmountIsZero: If amount_in is zero
            EstimatedResultIsZero: If estimated_result is zero
            FeeRateExceeded: If the rates are invalid
            SwapOverflow: If a reserve or accumulator overflows u64
            AfterswapCalculationFailed: If the opposite reserve cannot be computed
            ConstantProductToleranceExceeded: If rounding moved the product too far
            SwapResultIsZero: If the trader would receive nothing
            SwapSlippageExceeded: If the result misses the estimate
        """
        self.check_state(record)
        _require_u64("amount_in", amount_in)
        _require_u64("estimated_result", estimated_result)
        _require_u64("allowed_slippage", allowed_slippage)
        if amount_in == 0:
            raise SwapAmountIsZero("Swap amount is zero")
        if estimated_result == 0:
            raise EstimatedResultIsZero("Estimated result is zero")

        fees = self.fee_splitter.split(amount_in, providers_fee_rate_bp, protocol_fee_rate_bp)

        if direction.is_base_in:
            reserve_in, reserve_out = record.base_reserve, record.quote_reserve
            fees_to_redeem = record.protocol_base_fees_to_redeem
        else:
            reserve_in, reserve_out = record.quote_reserve, record.base_reserve
            fees_to_redeem = record.protocol_quote_fees_to_redeem

        new_fees_to_redeem = S(fees_to_redeem).checked_add(fees.protocol_fee)
        if new_fees_to_redeem is None:
            raise SwapOverflow("Protocol fee accumulator overflow")
        new_reserve_in = S(reserve_in).checked_add(fees.net_amount)
        if new_reserve_in is None:
            raise SwapOverflow("Input reserve overflow")

        new_reserve_out = opposite_reserve(record.sqrt_constant_product, new_reserve_in.value)
        if new_reserve_out is None:
            raise AfterswapCalculationFailed(
                f"Cannot compute output reserve for input reserve {new_reserve_in.value}"
            )

        if direction.is_base_in:
            curve_base, curve_quote = new_reserve_in.value, new_reserve_out
        else:
            curve_base, curve_quote = new_reserve_out, new_reserve_in.value
        self.guard.validate_constant_product(record.sqrt_constant_product, curve_base, curve_quote)

        result = reserve_out - new_reserve_out
        check_swap_result(result, estimated_result, allowed_slippage)

        final_reserve_in = new_reserve_in.checked_add(fees.provider_fee)
        if final_reserve_in is None:
            raise SwapOverflow("Input reserve overflow after provider fee")

        if direction.is_base_in:
            base_reserve, quote_reserve = final_reserve_in.value, new_reserve_out
            base_fees, quote_fees = new_fees_to_redeem.value, record.protocol_quote_fees_to_redeem
        else:
            base_reserve, quote_reserve = new_reserve_out, final_reserve_in.value
            base_fees, quote_fees = record.protocol_base_fees_to_redeem, new_fees_to_redeem.value

        new_sqrt_cp = sqrt_constant_product(base_reserve, quote_reserve)
        if new_sqrt_cp is None:
            raise ConstantProductCalculationFailed("Constant product after swap is zero")
        new_sqrt_ratio = sqrt_base_quote_ratio(base_reserve, quote_reserve)
        if new_sqrt_ratio is None:
            raise BaseQuoteRatioCalculationFailed("Base/quote ratio after swap cannot be computed")

        logger.debug(
            "swap_computed",
            direction=direction.value,
            amount_in=amount_in,
            amount_out=result,
            provider_fee=fees.provider_fee,
            protocol_fee=fees.protocol_fee,
        )
        return SwapPayload(
            base_reserve=base_reserve,
            quote_reserve=quote_reserve,
            protocol_base_fees_to_redeem=base_fees,
            protocol_quote_fees_to_redeem=quote_fees,
            amount_to_withdraw=result,
            provider_fee=fees.provider_fee,
            protocol_fee=fees.protocol_fee,
            direction=direction,
            sqrt_constant_product=new_sqrt_cp,
            sqrt_base_quote_ratio=new_sqrt_ratio,
        )

    def collect_fees(self, record: PoolRecord) -> CollectFeesPayload:
        """Compute the protocol fees to redeem.

        Raises:
            ProvidersFeesIsZero: If both accumulators are empty
        """
        self.check_state(record)
        base_fees = record.protocol_base_fees_to_redeem
        quote_fees = record.protocol_quote_fees_to_redeem
        if base_fees == 0 and quote_fees == 0:
            raise ProvidersFeesIsZero("No protocol fees to collect")
        return CollectFeesPayload(base_fees=base_fees, quote_fees=quote_fees)
