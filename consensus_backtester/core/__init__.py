"""Core backtesting components: engine, performance bookkeeping, config and logging."""
