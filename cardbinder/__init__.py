"""CardBinder: a virtual trading-card binder with scanner CSV import."""
