"""Analytics module — dashboard gap buckets and employee performance metrics."""
