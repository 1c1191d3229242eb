"""Interactive cognitive bias network: graph building, classification, and view state."""
