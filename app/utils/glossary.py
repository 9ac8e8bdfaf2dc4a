# Centralized tooltip/help text used across the app.

STAT_TOOLTIPS = {
    "Mean": "Arithmetic average of the valid observations (gaps are ignored).",
    "Median": "Middle observation after sorting; average of the two middle ones for even counts.",
    "Std Dev": "Population standard deviation: typical distance of an observation from the mean.",
    "CV": "Coefficient of variation = std dev / mean, in %. Scale-free measure of dispersion (0 when the mean is 0).",
    "Moving Avg": "Mean of the last N observations; smooths short-term noise.",
    "Trend": "Direction of the least-squares slope over time: up, down or stable within a small threshold.",
    "R²": "Share of the variance explained by the straight-line trend (0 to 1).",
    "Pearson": "Linear correlation between two series, from -1 to 1.",
    "Spearman": "Rank correlation: robust to outliers and to any monotonic rescaling.",
    "Lag": "Offset in periods between two series. Positive lag: the first series moves first.",
    "Cross-correlation": "Correlation recomputed at each lag; the strongest lag suggests who leads whom.",
    "Granger": "Tests whether past values of one series improve the prediction of another.",
    "STS": "Structural time series: splits the series into level and slope with confidence bands.",
    "Forecast": "One-step-ahead distribution of the next value (p05 to p95).",
}
