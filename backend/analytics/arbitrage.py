"""
Cash-Futures Arbitrage Detector
Flags snapshots whose futures premium/discount exceeds a threshold
and sizes the opportunity with exchange lot sizes.
"""

from datetime import datetime
from typing import Dict, Optional

from .models import ArbitrageResult, ProfitMetrics, SpreadTrend


# =============================================================================
# Lot Sizes
# =============================================================================

# NSE F&O lot sizes (Nov 2025 series)
LOT_SIZES: Dict[str, int] = {
    "RELIANCE": 250,
    "TCS": 150,
    "INFY": 300,
    "HDFCBANK": 550,
    "ICICIBANK": 1375,
    "SBIN": 1500,
    "BHARTIARTL": 550,
    "ITC": 1600,
    "KOTAKBANK": 400,
    "LT": 300,
    "AXISBANK": 600,
    "HINDUNILVR": 300,
    "ASIANPAINT": 150,
    "MARUTI": 50,
    "BAJFINANCE": 125,
}

FUTURES_MARGIN_RATE = 0.18


def get_lot_size(symbol: str) -> int:
    """Exchange lot size, 1 for unknown symbols"""
    return LOT_SIZES.get(symbol.upper(), 1)


# =============================================================================
# Profit Metrics
# =============================================================================

def calculate_profit_metrics(symbol: str, spot_price: float, futures_price: float) -> ProfitMetrics:
    """
    Gross profit of capturing the full spread on one lot.

    Margin is ~18% of the futures contract value.
    """
    lot_size = get_lot_size(symbol)
    gross_profit = abs(futures_price - spot_price) * lot_size
    margin_required = futures_price * lot_size * FUTURES_MARGIN_RATE
    roi_percentage = gross_profit / margin_required * 100 if margin_required > 0 else 0.0

    return ProfitMetrics(
        lot_size=lot_size,
        gross_profit=gross_profit,
        margin_required=margin_required,
        roi_percentage=roi_percentage
    )


def calculate_net_profit(gross_profit: float, contract_value: float) -> float:
    """
    Gross profit less typical round-trip charges.

    - Brokerage: 0.03% capped at 20 per order, buy + sell
    - STT: 0.025% on the futures sell side
    - Exchange charges: 0.002%
    - GST: 18% on brokerage
    """
    brokerage = min(contract_value * 0.0003, 20.0) * 2.0
    stt = contract_value * 0.00025
    exchange_charges = contract_value * 0.00002
    gst = brokerage * 0.18

    return gross_profit - (brokerage + stt + exchange_charges + gst)


# =============================================================================
# Detection
# =============================================================================

def detect_cash_futures_arbitrage(
    symbol: str,
    spot_price: float,
    futures_price: float,
    threshold_percentage: float = 0.5,
    trend: SpreadTrend = SpreadTrend.STABLE,
    now: Optional[datetime] = None
) -> ArbitrageResult:
    """
    Check one spot/futures quote for an arbitrage opportunity.

    Premium (futures above spot) → buy spot, sell futures.
    Discount → sell spot, buy futures.
    """
    symbol = symbol.upper()
    spread = futures_price - spot_price
    spread_percentage = spread / spot_price * 100 if spot_price else 0.0

    opportunity = abs(spread_percentage) > threshold_percentage

    if spread_percentage > threshold_percentage:
        action = "BUY Spot, SELL Futures"
    elif spread_percentage < -threshold_percentage:
        action = "SELL Spot, BUY Futures"
    else:
        action = "HOLD"

    quote = f"Spot: ₹{spot_price:.2f}, Futures: ₹{futures_price:.2f}, Spread: {spread_percentage:.2f}%"
    if opportunity:
        details = f"Arbitrage opportunity detected for {symbol}! {quote}"
    else:
        details = f"No arbitrage for {symbol}. {quote}"

    metrics = calculate_profit_metrics(symbol, spot_price, futures_price)

    return ArbitrageResult(
        opportunity=opportunity,
        symbol=symbol,
        spot_price=spot_price,
        futures_price=futures_price,
        spread=spread,
        spread_percentage=spread_percentage,
        action=action,
        details=details,
        lot_size=metrics.lot_size,
        gross_profit=metrics.gross_profit,
        margin_required=metrics.margin_required,
        roi_percentage=metrics.roi_percentage,
        spread_trend=SpreadTrend(trend),
        last_update=(now or datetime.now()).strftime("%H:%M:%S"),
    )
