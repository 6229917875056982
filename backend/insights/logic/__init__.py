"""Pure survey logic: visibility, aggregation and state reducers."""
