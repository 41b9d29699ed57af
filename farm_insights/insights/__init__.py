"""Rule-based insight generation over stock and sibling-domain snapshots."""
