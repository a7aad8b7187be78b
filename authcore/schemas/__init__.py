"""Wire schemas for authority requests and responses."""
