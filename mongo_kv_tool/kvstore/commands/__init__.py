"""Click commands for the kvstore group."""
