"""
Technical Indicators
====================
Calculate the indicators used by the default indicator suite.
"""

import numpy as np
import pandas as pd


def calculate_atr(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Average True Range (ATR).

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        period: Lookback period (default: 14)

    Returns:
        ATR series
    """
    high = pd.Series(high)
    low = pd.Series(low)
    close = pd.Series(close)

    # True Range = max(high-low, abs(high-prev_close), abs(low-prev_close))
    prev_close = close.shift(1)

    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()

    true_range = pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)

    # ATR is smoothed average of TR (Wilder's smoothing)
    atr = true_range.ewm(alpha=1/period, min_periods=period, adjust=False).mean()

    return atr


def calculate_rsi(
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Relative Strength Index (RSI).

    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss

    Args:
        close: Close prices
        period: Lookback period (default: 14)

    Returns:
        RSI series (0-100)
    """
    close = pd.Series(close)
    delta = close.diff()

    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    # Use Wilder's smoothing (same as EMA with alpha = 1/period)
    avg_gain = gain.ewm(alpha=1/period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1/period, min_periods=period, adjust=False).mean()

    rs = avg_gain / avg_loss.replace(0, np.nan)
    rsi = 100 - (100 / (1 + rs))

    # No losses in the window: RSI saturates at 100 (50 when flat)
    rsi[(avg_loss == 0) & (avg_gain > 0)] = 100.0
    rsi[(avg_loss == 0) & (avg_gain == 0)] = 50.0

    return rsi


def calculate_mfi(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    volume: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Money Flow Index (MFI), a volume-weighted RSI.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        volume: Volume
        period: Lookback period (default: 14)

    Returns:
        MFI series (0-100)
    """
    typical_price = (pd.Series(high) + pd.Series(low) + pd.Series(close)) / 3
    raw_flow = typical_price * pd.Series(volume)
    direction = typical_price.diff()

    positive = raw_flow.where(direction > 0, 0.0).rolling(window=period).sum()
    negative = raw_flow.where(direction < 0, 0.0).rolling(window=period).sum()

    ratio = positive / negative.replace(0, np.nan)
    mfi = 100 - (100 / (1 + ratio))
    mfi[(negative == 0) & (positive > 0)] = 100.0
    mfi[(negative == 0) & (positive == 0)] = 50.0

    # First bar has no direction
    mfi.iloc[:period] = np.nan
    return mfi


def calculate_wma(
    close: pd.Series,
    period: int = 20,
) -> pd.Series:
    """Linearly weighted moving average (newest bar weighs most)."""
    weights = np.arange(1, period + 1, dtype=float)
    return pd.Series(close).rolling(window=period).apply(
        lambda window: np.dot(window, weights) / weights.sum(), raw=True
    )


def calculate_hma(
    close: pd.Series,
    period: int = 9,
) -> pd.Series:
    """
    Calculate Hull Moving Average (HMA).

    HMA = WMA(2 * WMA(close, n/2) - WMA(close, n), sqrt(n))

    Args:
        close: Close prices
        period: Lookback period (default: 9)

    Returns:
        HMA series
    """
    close = pd.Series(close)
    half = max(int(period / 2), 1)
    root = max(int(np.sqrt(period)), 1)

    raw = 2 * calculate_wma(close, half) - calculate_wma(close, period)
    return calculate_wma(raw, root)


def calculate_atso(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    ema_period: int = 5,
    atr_period: int = 14,
) -> pd.Series:
    """
    Calculate the Adaptive Trend Strength Oscillator (ATSO).

    Smoothed bar-over-bar change expressed in ATR units: the sign is the
    trend direction, the magnitude is how many ATRs per bar price is moving.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        ema_period: Smoothing period for the price change
        atr_period: ATR period used for normalisation

    Returns:
        ATSO series
    """
    close = pd.Series(close)
    change = close.diff().ewm(span=ema_period, min_periods=ema_period, adjust=False).mean()
    atr = calculate_atr(high, low, close, atr_period)
    return change / atr.replace(0, np.nan)


def calculate_vwao(
    close: pd.Series,
    volume: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate the Volume Weighted Average Oscillator (VWAO).

    Percentage distance of close from its rolling volume-weighted average.

    Args:
        close: Close prices
        volume: Volume
        period: Rolling window (default: 14)

    Returns:
        VWAO series (percent)
    """
    close = pd.Series(close)
    volume = pd.Series(volume)
    vwma = (close * volume).rolling(window=period).sum() / volume.rolling(
        window=period
    ).sum().replace(0, np.nan)
    return (close - vwma) / vwma * 100


def crossed_above(line: pd.Series, reference: pd.Series) -> bool:
    """True if ``line`` moved from <= reference to > reference on the last bar"""
    pair = pd.concat([pd.Series(line), pd.Series(reference)], axis=1).dropna()
    if len(pair) < 2 or pair.index[-1] != len(line) - 1:
        return False
    (prev_line, prev_ref), (last_line, last_ref) = pair.iloc[-2], pair.iloc[-1]
    return prev_line <= prev_ref and last_line > last_ref


def crossed_below(line: pd.Series, reference: pd.Series) -> bool:
    """True if ``line`` moved from >= reference to < reference on the last bar"""
    pair = pd.concat([pd.Series(line), pd.Series(reference)], axis=1).dropna()
    if len(pair) < 2 or pair.index[-1] != len(line) - 1:
        return False
    (prev_line, prev_ref), (last_line, last_ref) = pair.iloc[-2], pair.iloc[-1]
    return prev_line >= prev_ref and last_line < last_ref
