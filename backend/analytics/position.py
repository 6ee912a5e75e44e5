"""
Position P&L Calculator
What-if P&L for one manually specified cash-futures pair trade.

Long spot, short futures:
    spot_pnl    = (spot_exit − spot_entry) · qty
    futures_pnl = (futures_entry − futures_exit) · qty
"""

from .models import PositionPnL


def calculate_position_pnl(
    quantity: float,
    spot_entry: float,
    spot_exit: float,
    futures_entry: float,
    futures_exit: float,
    fee_rate: float = 0.05,
    margin_rate: float = 0.2
) -> PositionPnL:
    """
    Compute P&L, fees, margin and ROI of a pair trade.

    Args:
        quantity: Shares per leg
        spot_entry / spot_exit: Cash leg prices
        futures_entry / futures_exit: Futures leg prices
        fee_rate: Fee in percent of every leg's notional (entry and exit)
        margin_rate: Fraction of entry notional blocked as margin

    Returns:
        PositionPnL (roi is 0 when the margin is 0)
    """
    spot_pnl = (spot_exit - spot_entry) * quantity
    futures_pnl = (futures_entry - futures_exit) * quantity
    gross_pnl = spot_pnl + futures_pnl

    total_fees = (spot_entry + futures_entry + spot_exit + futures_exit) * quantity * fee_rate / 100
    net_pnl = gross_pnl - total_fees

    margin = margin_rate * quantity * (spot_entry + futures_entry)
    roi = net_pnl / margin * 100 if margin else 0.0

    return PositionPnL(
        spot_pnl=spot_pnl,
        futures_pnl=futures_pnl,
        gross_pnl=gross_pnl,
        total_fees=total_fees,
        net_pnl=net_pnl,
        margin=margin,
        roi=roi
    )
